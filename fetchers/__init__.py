"""Fetchers package for retrieving WordPress content via the REST API."""

from .base_fetcher import AssetDownloadError, BaseFetcher, FetchError, FetcherError
from .wordpress_client import WordPressClient
from .api_fetcher import ApiFetcher

__all__ = [
    'BaseFetcher',
    'FetcherError',
    'FetchError',
    'AssetDownloadError',
    'WordPressClient',
    'ApiFetcher'
]
