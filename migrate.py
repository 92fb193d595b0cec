#!/usr/bin/env python3
"""
WordPress to Markdown Migration Tool - Main CLI Entry Point

Fetches posts and pages from a WordPress REST API, downloads their images
next to each post, converts the HTML to Markdown and writes a folder-per-post
content tree for a static site generator.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

import yaml

from config_loader import ConfigLoader, get_nested
from fetchers import FetchError
from logger import log_config, log_section, setup_logging
from orchestrator import MigrationOrchestrator, MigrationReport

__version__ = "1.0.0"

DEFAULT_CONFIG_PATH = 'config.yaml'


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Migrate WordPress posts and pages to Markdown content collections",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Migrate using config.yaml
  python migrate.py

  # No config file, everything from flags
  python migrate.py --site-url https://blog.example.com --content-dir ./src/content

  # Posts only, preview without writing
  python migrate.py --collections posts --dry-run

  # Four items at a time, verbose logging
  python migrate.py --max-workers 4 -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help=f'Path to configuration YAML file (default: {DEFAULT_CONFIG_PATH} if present)'
    )

    parser.add_argument(
        '--site-url',
        type=str,
        help='WordPress site root, e.g. https://blog.example.com'
    )

    parser.add_argument(
        '--content-dir',
        type=str,
        help='Content directory receiving posts/ and pages/ (default: ./src/content)'
    )

    parser.add_argument(
        '--collections',
        type=str,
        help='Comma-separated collections to migrate (posts,pages)'
    )

    parser.add_argument(
        '--dry-run',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Fetch and convert without downloading images or writing files'
    )

    parser.add_argument(
        '--max-workers',
        type=int,
        default=None,
        help='Number of items processed concurrently (default: 1)'
    )

    parser.add_argument(
        '--report-path',
        type=str,
        help='Write a JSON migration report to this path'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def resolve_config_path(args: argparse.Namespace) -> Optional[str]:
    """Explicit --config must exist; the default file is optional."""
    if args.config:
        return args.config
    if os.path.exists(DEFAULT_CONFIG_PATH):
        return DEFAULT_CONFIG_PATH
    return None


def run_migration(config: dict, logger: logging.Logger) -> int:
    """Execute the migration pipeline and return an exit code."""
    try:
        orchestrator = MigrationOrchestrator(config)
        report = orchestrator.run()
    except FetchError as e:
        logger.error(f"Migration failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.error("Migration interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Migration failed: {str(e)}", exc_info=True)
        return 1

    report_generator = MigrationReport()
    print("\n" + report_generator.format_console_report(report))

    report_path = get_nested(config, 'migration.report_path')
    if report_path:
        try:
            report_generator.export_json_report(report, report_path)
        except OSError as e:
            logger.warning(f"Failed to export JSON report: {str(e)}")

    errors = report['summary']['total_errors']
    if errors > 0:
        logger.warning(f"Migration completed with {errors} failed items")
        if get_nested(config, 'migration.fail_on_item_errors', False):
            return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(verbosity=max(args.verbose, 1))
        logger = logging.getLogger('wp_markdown_migrator.cli')

        config_path = resolve_config_path(args)
        if config_path:
            logger.info(f"Loading configuration from {config_path}")
        config = ConfigLoader.load(config_path)
        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)

        # Reconfigure logging with config file settings
        setup_logging(
            log_file=get_nested(config, 'logging.file'),
            level=get_nested(config, 'logging.level', 'INFO')
        )
    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid YAML in configuration: {e}", file=sys.stderr)
        return 2

    log_section("WordPress to Markdown Migration")
    log_config(config)

    return run_migration(config, logger)


if __name__ == "__main__":
    sys.exit(main())
