"""Asset rehomer: downloads the images an item references into its own directory."""

import html
import logging
import os
import sys
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from tqdm import tqdm

from fetchers import AssetDownloadError
from models import LocalAsset, RehomeResult, RemoteItem

DEFAULT_EXTENSION = '.jpg'
FEATURED_BASENAME = 'featured'
INLINE_BASENAME = 'image'


def get_extension(url: str) -> str:
    """
    Infer a file extension from a URL path.

    Args:
        url: Image URL

    Returns:
        Lower-cased extension with leading dot, ``.jpg`` when absent or unparseable
    """
    try:
        path = urlparse(url).path
    except (ValueError, AttributeError):
        return DEFAULT_EXTENSION
    ext = os.path.splitext(path)[1].lower()
    return ext or DEFAULT_EXTENSION


def extract_image_urls(html_content: str) -> List[str]:
    """Return every ``<img src>`` in document order, repeats included."""
    if not html_content:
        return []
    soup = BeautifulSoup(html_content, 'lxml')
    return [img['src'] for img in soup.find_all('img', src=True) if img['src'].strip()]


def get_featured_image_url(media: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Pick the featured image URL from an embedded ``wp:featuredmedia`` object.

    Priority: "large" size, "full" size, the media's own source URL.
    """
    if not media:
        return None
    sizes = (media.get('media_details') or {}).get('sizes') or {}
    for size in ('large', 'full'):
        source_url = (sizes.get(size) or {}).get('source_url')
        if source_url:
            return source_url
    return media.get('source_url') or None


def is_site_image(url: str, allowed_hosts: Iterable[str]) -> bool:
    """
    Check whether an image URL is hosted by the source site.

    Absolute URLs must match one of ``allowed_hosts`` exactly (case-insensitive).
    Relative and protocol-relative URLs without a host count as on-site.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ('', 'http', 'https'):
        return False
    if not parsed.netloc:
        return bool(parsed.path)
    return (parsed.hostname or '').lower() in allowed_hosts


def replace_url(body: str, url: str, replacement: str) -> str:
    """Replace every literal occurrence of ``url`` in raw HTML, plain or entity-escaped."""
    if _is_relative(url):
        # Only quoted attribute values, so absolute URLs ending in the same path survive
        for quote in ('"', "'"):
            for form in _url_forms(url):
                body = body.replace(f"{quote}{form}{quote}", f"{quote}{replacement}{quote}")
        return body

    for form in _url_forms(url):
        body = body.replace(form, replacement)
    return body


def _url_forms(url: str) -> List[str]:
    escaped = html.escape(url, quote=False)
    return [url] if escaped == url else [url, escaped]


def _is_relative(url: str) -> bool:
    try:
        return not urlparse(url).netloc
    except ValueError:
        return False


class AssetRehomer:
    """
    Makes every image an item references locally resolvable.

    For each post this rehomer:
    1. Downloads the featured image to ``featured<ext>``
    2. Downloads on-site inline images to ``image-<n><ext>`` in first-occurrence order
    3. Rewrites the body so downloaded images point at ``./<local file>``

    A failed download is logged and counted, never raised.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        client,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the rehomer.

        Args:
            config: Configuration dictionary
            client: Object with a ``download(url) -> bytes`` method
            logger: Logger instance
        """
        self.config = config
        self.client = client
        self.logger = logger or logging.getLogger('wp_markdown_migrator.exporters.asset_rehomer')

        self.site_url = config.get('wordpress', {}).get('base_url') or ''
        site_host = (urlparse(self.site_url).hostname or '').lower()
        images_config = config.get('images', {})
        self.allowed_hosts = {site_host} | {
            host.lower() for host in images_config.get('allowed_hosts') or []
        }
        self.download_featured = images_config.get('download_featured', True)
        self.download_inline = images_config.get('download_inline', True)
        self.show_progress = (
            images_config.get('progress_bars', True)
            and config.get('migration', {}).get('max_workers', 1) == 1
        )

        self._stats_lock = threading.Lock()
        self.stats = {
            'featured_downloaded': 0,
            'inline_downloaded': 0,
            'failed': 0,
            'skipped_external': 0,
            'total_size_bytes': 0
        }

    def rehome(self, item: RemoteItem, item_dir: Path) -> RehomeResult:
        """
        Download featured and inline images of an item and rewrite its body.

        Args:
            item: Post to process
            item_dir: Output directory owned by this item

        Returns:
            RehomeResult with the rewritten body and the local assets
        """
        result = RehomeResult(body_html=item.body_html)

        if self.download_featured:
            featured_url = get_featured_image_url(item.featured_media)
            if featured_url:
                result.featured = self._download_asset(
                    featured_url, item_dir, f"{FEATURED_BASENAME}{get_extension(featured_url)}"
                )
                if result.featured:
                    self._bump('featured_downloaded')
                else:
                    result.failed += 1

        if self.download_inline:
            body, inline, failed, skipped = self.rehome_inline(item.body_html, item_dir, label=item.slug)
            result.body_html = body
            result.inline = inline
            result.failed += failed
            result.skipped_external = skipped

        return result

    def rehome_inline(
        self,
        body_html: str,
        item_dir: Path,
        label: str = ''
    ) -> Tuple[str, List[LocalAsset], int, int]:
        """
        Download on-site inline images and point the body at the local copies.

        The counter advances only on a successful download. A URL that was
        already rehomed is not fetched again; its later occurrences were
        rewritten with the first one.

        Returns:
            Tuple of (rewritten body, downloaded assets, failed count, external count)
        """
        urls = extract_image_urls(body_html)
        assets: List[LocalAsset] = []
        rehomed: Dict[str, LocalAsset] = {}
        failed = 0
        skipped = 0
        index = 1

        url_iter = urls
        if urls and self._should_show_progress():
            url_iter = tqdm(urls, desc=f"Images: {label[:30]}", leave=False)

        for url in url_iter:
            if url in rehomed:
                self.logger.debug(f"    Already rehomed: {url} -> {rehomed[url].local_filename}")
                continue

            if not is_site_image(url, self.allowed_hosts):
                self.logger.debug(f"    Leaving external image: {url}")
                skipped += 1
                continue

            asset = self._download_asset(url, item_dir, f"{INLINE_BASENAME}-{index}{get_extension(url)}")
            if asset is None:
                failed += 1
                continue

            body_html = replace_url(body_html, url, asset.reference)
            rehomed[url] = asset
            assets.append(asset)
            index += 1

        self._bump('inline_downloaded', len(assets))
        self._bump('skipped_external', skipped)
        return body_html, assets, failed, skipped

    def download_image(self, url: str, dest_path: Path) -> bool:
        """
        Download an image to ``dest_path``.

        Returns:
            True on success, False if the download or the write failed
        """
        self.logger.info(f"    Downloading: {dest_path.name}")
        try:
            content = self.client.download(self._resolve(url))
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            dest_path.write_bytes(content)
        except AssetDownloadError as e:
            self.logger.warning(f"    {e}")
            self._bump('failed')
            return False
        except OSError as e:
            self.logger.warning(f"    Failed to write {dest_path}: {e}")
            self._bump('failed')
            return False

        self._bump('total_size_bytes', len(content))
        return True

    def _download_asset(self, url: str, item_dir: Path, filename: str) -> Optional[LocalAsset]:
        local_path = item_dir / filename
        if not self.download_image(url, local_path):
            return None
        return LocalAsset(source_url=url, local_filename=filename, local_path=local_path)

    def _resolve(self, url: str) -> str:
        """Absolute URL for downloading; relative URLs resolve against the site."""
        if not urlparse(url).scheme:
            return urljoin(self.site_url.rstrip('/') + '/', url)
        return url

    def _bump(self, key: str, amount: int = 1) -> None:
        with self._stats_lock:
            self.stats[key] += amount

    def _should_show_progress(self) -> bool:
        """Check if progress bars should be displayed."""
        return bool(self.show_progress) and sys.stdout.isatty()

    def get_stats(self) -> Dict[str, int]:
        """Get image processing statistics."""
        with self._stats_lock:
            return self.stats.copy()
