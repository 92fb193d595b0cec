"""Tests for the REST client's request building and error mapping."""

import unittest
from unittest.mock import MagicMock

import requests

from fetchers import AssetDownloadError, FetchError, WordPressClient


def make_response(status_code=200, json_data=None, headers=None, content=b''):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.headers = headers or {}
    response.content = content
    response.json.return_value = json_data
    return response


class TestWordPressClient(unittest.TestCase):

    def setUp(self):
        self.session = MagicMock()
        self.client = WordPressClient('https://blog.example.com/', timeout=12, session=self.session)

    def test_collection_url_strips_trailing_slash(self):
        self.assertEqual(
            self.client.collection_url('posts'),
            'https://blog.example.com/wp-json/wp/v2/posts'
        )

    def test_get_collection_returns_list(self):
        self.session.get.return_value = make_response(
            json_data=[{'slug': 'a'}], headers={'X-WP-Total': '1'}
        )

        items = self.client.get_collection('posts', params={'per_page': 100, '_embed': 1})

        self.assertEqual(items, [{'slug': 'a'}])
        self.session.get.assert_called_once_with(
            'https://blog.example.com/wp-json/wp/v2/posts',
            params={'per_page': 100, '_embed': 1},
            timeout=12
        )
        self.assertEqual(self.client.last_total, 1)

    def test_missing_total_header(self):
        self.session.get.return_value = make_response(json_data=[])

        self.client.get_collection('pages')

        self.assertIsNone(self.client.last_total)

    def test_http_error_carries_status_code(self):
        self.session.get.return_value = make_response(status_code=404)

        with self.assertRaises(FetchError) as ctx:
            self.client.get_collection('posts')

        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIn('404', str(ctx.exception))

    def test_transport_error_has_no_status(self):
        self.session.get.side_effect = requests.exceptions.ConnectionError('refused')

        with self.assertRaises(FetchError) as ctx:
            self.client.get_collection('posts')

        self.assertIsNone(ctx.exception.status_code)

    def test_timeout_is_a_fetch_error(self):
        self.session.get.side_effect = requests.exceptions.Timeout('slow')

        with self.assertRaises(FetchError):
            self.client.get_collection('pages')

    def test_non_list_body_is_rejected(self):
        self.session.get.return_value = make_response(json_data={'code': 'rest_no_route'})

        with self.assertRaises(FetchError):
            self.client.get_collection('posts')

    def test_invalid_json_is_rejected(self):
        response = make_response()
        response.json.side_effect = ValueError('no json')
        self.session.get.return_value = response

        with self.assertRaises(FetchError):
            self.client.get_collection('posts')

    def test_download_returns_bytes(self):
        self.session.get.return_value = make_response(content=b'\x89PNG')

        self.assertEqual(self.client.download('https://blog.example.com/a.png'), b'\x89PNG')

    def test_download_http_error(self):
        self.session.get.return_value = make_response(status_code=500)

        with self.assertRaises(AssetDownloadError) as ctx:
            self.client.download('https://blog.example.com/a.png')

        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.url, 'https://blog.example.com/a.png')

    def test_download_transport_error(self):
        self.session.get.side_effect = requests.exceptions.ConnectionError('reset')

        with self.assertRaises(AssetDownloadError) as ctx:
            self.client.download('https://blog.example.com/a.png')

        self.assertIsNone(ctx.exception.status_code)

    def test_from_config(self):
        client = WordPressClient.from_config({
            'wordpress': {'base_url': 'https://blog.example.com', 'user_agent': 'test-agent/1.0'},
            'advanced': {'request_timeout': 5},
        })

        self.assertEqual(client.base_url, 'https://blog.example.com')
        self.assertEqual(client.timeout, 5)
        self.assertEqual(client.session.headers['User-Agent'], 'test-agent/1.0')


if __name__ == '__main__':
    unittest.main()
