"""Abstract base fetcher interface and fetch-related errors."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from models import ItemKind, RemoteItem


class FetcherError(Exception):
    """Base exception for fetcher-related errors."""
    pass


class FetchError(FetcherError):
    """The item list of a collection could not be retrieved. Fatal for a run."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AssetDownloadError(FetcherError):
    """A single image could not be downloaded. Always recovered locally."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        super().__init__(f"Failed to download {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


class BaseFetcher(ABC):
    """Abstract base class for WordPress content fetchers."""

    def __init__(self, config: Dict[str, Any], logger: Optional[logging.Logger] = None):
        """
        Initialize base fetcher with configuration and logger.

        Args:
            config: Configuration dictionary
            logger: Logger instance (optional, uses module logger if not provided)
        """
        self.config = config
        self.logger = logger or logging.getLogger('wp_markdown_migrator.fetcher')

    @abstractmethod
    def fetch_items(self, kind: ItemKind) -> List[RemoteItem]:
        """
        Fetch every item of one collection.

        Args:
            kind: Collection to fetch

        Returns:
            List of RemoteItem objects

        Raises:
            FetchError: If the collection cannot be retrieved
        """
        pass

    def fetch_posts(self) -> List[RemoteItem]:
        return self.fetch_items(ItemKind.POSTS)

    def fetch_pages(self) -> List[RemoteItem]:
        return self.fetch_items(ItemKind.PAGES)

    def _log_progress(self, message: str, level: str = 'info') -> None:
        """
        Log progress message at specified level.

        Args:
            message: Message to log
            level: Log level (debug, info, warning, error)
        """
        log_method = getattr(self.logger, level, self.logger.info)
        log_method(message)
