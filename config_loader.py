"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import yaml

from models import ItemKind


DEFAULT_CONFIG: Dict[str, Any] = {
    'wordpress': {
        'base_url': None,
        'per_page': 100,
        'user_agent': 'wp-markdown-migrator/1.0',
        'verify_ssl': True,
    },
    'export': {
        'content_directory': './src/content',
        'posts_directory': 'posts',
        'pages_directory': 'pages',
    },
    'images': {
        'download_featured': True,
        'download_inline': True,
        'allowed_hosts': [],
        'progress_bars': True,
    },
    'migration': {
        'collections': ['posts', 'pages'],
        'dry_run': False,
        'max_workers': 1,
        'fail_on_item_errors': False,
        'report_path': None,
    },
    'advanced': {
        'request_timeout': 30,
    },
    'logging': {
        'level': 'INFO',
        'file': None,
    },
}


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Values from the file are deep-merged over ``DEFAULT_CONFIG``. Without a
        path the defaults are returned as-is.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        if config_path is None:
            return copy.deepcopy(DEFAULT_CONFIG)

        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        # Substitute environment variables recursively
        config_data = cls._substitute_env_vars_recursive(config_data)

        return _deep_merge(DEFAULT_CONFIG, config_data)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for required fields and correct values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        cls._validate_required_field(config, 'wordpress.base_url')
        cls._validate_url(get_nested(config, 'wordpress.base_url'), 'wordpress.base_url')

        per_page = get_nested(config, 'wordpress.per_page', 100)
        if not isinstance(per_page, int) or isinstance(per_page, bool) or not 1 <= per_page <= 100:
            raise ValueError("wordpress.per_page must be an integer between 1 and 100")

        for field in ('wordpress.verify_ssl', 'images.download_featured', 'images.download_inline',
                      'images.progress_bars', 'migration.dry_run', 'migration.fail_on_item_errors'):
            value = get_nested(config, field)
            if value is not None and not isinstance(value, bool):
                raise ValueError(f"{field} must be a boolean")

        allowed_hosts = get_nested(config, 'images.allowed_hosts', [])
        if not isinstance(allowed_hosts, list):
            raise ValueError("images.allowed_hosts must be a list of host names")

        cls._validate_required_field(config, 'export.content_directory')
        content_dir = get_nested(config, 'export.content_directory')
        if os.path.exists(content_dir) and not os.path.isdir(content_dir):
            raise ValueError(f"export.content_directory '{content_dir}' is not a directory")

        for field in ('export.posts_directory', 'export.pages_directory'):
            cls._validate_required_field(config, field)

        collections = get_nested(config, 'migration.collections', [])
        if isinstance(collections, str):
            collections = [collections]
        valid = [kind.value for kind in ItemKind]
        if not collections:
            raise ValueError("migration.collections must name at least one collection")
        for collection in collections:
            if collection not in valid:
                raise ValueError(f"migration.collections entries must be one of: {valid}")

        max_workers = get_nested(config, 'migration.max_workers', 1)
        if not isinstance(max_workers, int) or isinstance(max_workers, bool) or max_workers < 1:
            raise ValueError("migration.max_workers must be a positive integer")

        # Validate timeout settings
        timeout = get_nested(config, 'advanced.request_timeout', 30)
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
            raise ValueError("advanced.request_timeout must be a positive number")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)

        for section in ('wordpress', 'export', 'migration', 'logging'):
            merged.setdefault(section, {})

        if getattr(args, 'site_url', None):
            merged['wordpress']['base_url'] = args.site_url

        if getattr(args, 'content_dir', None):
            merged['export']['content_directory'] = args.content_dir

        if getattr(args, 'collections', None):
            merged['migration']['collections'] = [
                name.strip() for name in args.collections.split(',') if name.strip()
            ]

        if getattr(args, 'dry_run', None) is not None:
            merged['migration']['dry_run'] = args.dry_run

        if getattr(args, 'max_workers', None) is not None:
            merged['migration']['max_workers'] = args.max_workers

        if getattr(args, 'report_path', None):
            merged['migration']['report_path'] = args.report_path

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        verbose = getattr(args, 'verbose', 0) or 0
        if verbose >= 2:
            merged['logging']['level'] = 'DEBUG'
        elif verbose == 1:
            merged['logging']['level'] = 'INFO'

        return merged

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            var_name = match.group(1)
            env_value = os.getenv(var_name)
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @staticmethod
    def _validate_required_field(config_section: dict, field: str) -> None:
        """Validate that a required field exists and has a value."""
        value = get_nested(config_section, field)
        if value is None or value == '':
            raise ValueError(f"Missing required configuration: {field}")

        # Check for unsubstituted environment variables
        if isinstance(value, str) and '${' in value:
            match = ConfigLoader.ENV_VAR_PATTERN.search(value)
            var_name = match.group(1) if match else value
            raise ValueError(
                f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                f"Please set the {var_name} environment variable or provide a value in config file."
            )

    @staticmethod
    def _validate_url(url: str, field_name: str) -> None:
        """Validate URL format."""
        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise ValueError(f"Invalid URL for {field_name}: {url}. Error: {str(e)}")
        if not parsed.scheme or parsed.scheme not in ['http', 'https']:
            raise ValueError(f"{field_name} must use http or https scheme: {url}")
        if not parsed.netloc:
            raise ValueError(f"{field_name} missing hostname: {url}")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``base`` with ``override`` merged in, recursing into dicts."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "wordpress.base_url")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    keys = path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


__all__ = ['ConfigLoader', 'DEFAULT_CONFIG', 'get_nested']
