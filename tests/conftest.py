"""Shared fixtures: an in-memory WordPress client and a ready-to-use config."""

import pytest

from config_loader import ConfigLoader
from fetchers import AssetDownloadError

SITE_URL = 'https://blog.example.com'


class FakeWordPressClient:
    """Serves canned collections and image bytes without touching the network."""

    def __init__(self, collections=None, failing_urls=(), fetch_error=None):
        self.collections = collections or {}
        self.failing_urls = set(failing_urls)
        self.fetch_error = fetch_error
        self.last_total = None
        self.collection_calls = []
        self.downloads = []

    def get_collection(self, kind, params=None):
        self.collection_calls.append((kind, params))
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.collections.get(kind, []))

    def download(self, url):
        self.downloads.append(url)
        if url in self.failing_urls:
            raise AssetDownloadError(url, 'HTTP 404', status_code=404)
        return f"bytes of {url}".encode('utf-8')


@pytest.fixture
def config(tmp_path):
    """Default configuration pointed at a temporary content directory."""
    config = ConfigLoader.load()
    config['wordpress']['base_url'] = SITE_URL
    config['export']['content_directory'] = str(tmp_path / 'content')
    config['images']['progress_bars'] = False
    return config


@pytest.fixture
def fake_client():
    return FakeWordPressClient()

