"""WordPress REST API client used for collection fetches and image downloads."""

import logging
import time
from typing import Any, Dict, List, Optional

import requests
import urllib3

from .base_fetcher import AssetDownloadError, FetchError

logger = logging.getLogger('wp_markdown_migrator.client')

API_PREFIX = '/wp-json/wp/v2'


class WordPressClient:
    """Thin WordPress REST API client. One session, no retries."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        user_agent: Optional[str] = None,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: Site root, e.g. "https://blog.example.com"
            timeout: HTTP request timeout in seconds
            user_agent: Optional User-Agent header value
            verify_ssl: Whether to verify SSL certificates
            session: Optional pre-built session (tests inject a mock)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.last_total: Optional[int] = None

        if user_agent:
            self.session.headers['User-Agent'] = user_agent

        self.session.verify = verify_ssl
        if not verify_ssl:
            logger.warning("SSL verification disabled - this is insecure!")
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        logger.debug(f"Client configured for {self.base_url} with timeout={timeout}s")

    def collection_url(self, kind: str) -> str:
        return f"{self.base_url}{API_PREFIX}/{kind}"

    def get_collection(self, kind: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Fetch one page of a REST collection.

        Args:
            kind: Collection name ("posts" or "pages")
            params: Query parameters

        Returns:
            Decoded JSON list of item objects

        Raises:
            FetchError: On transport errors, non-success status or a non-list body
        """
        url = self.collection_url(kind)
        start_time = time.time()
        logger.debug(f"API Request: GET {url} params={params}")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: GET {url} - {str(e)}")
            raise FetchError(f"Failed to fetch {kind}: {str(e)}") from e

        logger.debug(f"API Response: {response.status_code} {url} ({time.time() - start_time:.3f}s)")

        if not response.ok:
            logger.error(f"HTTP Error {response.status_code}: GET {url}")
            raise FetchError(f"Failed to fetch {kind}: {response.status_code}", status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(f"Failed to fetch {kind}: response is not JSON", status_code=response.status_code) from e

        if not isinstance(data, list):
            raise FetchError(
                f"Failed to fetch {kind}: expected a JSON array, got {type(data).__name__}",
                status_code=response.status_code
            )

        self.last_total = _header_int(response.headers, 'X-WP-Total')
        return data

    def download(self, url: str) -> bytes:
        """
        Download raw bytes from an arbitrary URL.

        Args:
            url: Absolute URL to download

        Returns:
            Response body

        Raises:
            AssetDownloadError: On any transport error or non-success status
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise AssetDownloadError(url, str(e)) from e

        if not response.ok:
            raise AssetDownloadError(url, f"HTTP {response.status_code}", status_code=response.status_code)

        return response.content

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'WordPressClient':
        """
        Initialize client from configuration dictionary.

        Args:
            config: Configuration dictionary with wordpress and advanced settings

        Returns:
            WordPressClient instance
        """
        wordpress_config = config.get('wordpress', {})
        advanced_config = config.get('advanced', {})

        return cls(
            base_url=wordpress_config.get('base_url'),
            timeout=advanced_config.get('request_timeout', 30),
            user_agent=wordpress_config.get('user_agent'),
            verify_ssl=wordpress_config.get('verify_ssl', True)
        )


def _header_int(headers, name: str) -> Optional[int]:
    value = headers.get(name) if headers is not None else None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
