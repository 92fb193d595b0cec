"""End-to-end pipeline tests against an in-memory WordPress site."""

from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import SITE_URL, FakeWordPressClient
from fetchers import FetchError
from orchestrator import MigrationOrchestrator, MigrationReport

UPLOADS = f"{SITE_URL}/wp-content/uploads/2023/01"


def make_post(slug='hello-world', body=None, featured=True):
    post = {
        'id': 1,
        'slug': slug,
        'date': '2023-01-15T10:00:00',
        'modified': '2023-01-15T10:00:00',
        'title': {'rendered': 'Hello &amp; welcome'},
        'content': {'rendered': body if body is not None else (
            f'<figure class="wp-block-image"><img src="{UPLOADS}/photo.PNG?resize=1" alt="A photo"/>'
            '<figcaption>Taken at dawn</figcaption></figure>'
            '<p>First paragraph.</p>'
            '<iframe src="https://www.youtube.com/embed/abc123?rel=0"></iframe>'
            '<p><img src="https://cdn.other.org/hotlinked.jpg"></p>'
        )},
        'excerpt': {'rendered': '<p>Short intro</p>'},
    }
    if featured:
        post['_embedded'] = {'wp:featuredmedia': [{
            'alt_text': 'Sunrise',
            'media_details': {'sizes': {'large': {'source_url': f"{UPLOADS}/cover-1024x768.jpg"}}},
        }]}
    return post


PAGE = {
    'id': 2,
    'slug': 'about',
    'date': '2022-05-01T08:00:00',
    'title': {'rendered': 'About'},
    'content': {'rendered': '<p>About us</p>'},
}


@pytest.fixture
def site():
    return FakeWordPressClient(collections={'posts': [make_post()], 'pages': [PAGE]})


def content_dir(config):
    return Path(config['export']['content_directory'])


class TestMigrationRun:

    def test_full_migration(self, config, site):
        report = MigrationOrchestrator(config, client=site).run()

        post_dir = content_dir(config) / 'posts' / 'hello-world'
        index = (post_dir / 'index.md').read_text(encoding='utf-8')

        assert index.startswith('---\ntitle: "Hello & welcome"\ndescription: "Short intro"\ndate: 2023-01-15\n')
        assert 'modified:' not in index
        assert 'featured: ./featured.jpg\nfeaturedAlt: "Sunrise"\ndraft: false\n---\n\n' in index
        assert '![A photo](./image-1.png)\n*Taken at dawn*' in index
        assert '[Watch on YouTube](https://www.youtube.com/watch?v=abc123)' in index
        assert 'https://cdn.other.org/hotlinked.jpg' in index
        assert index.endswith('\n') and not index.endswith('\n\n')

        assert sorted(p.name for p in post_dir.iterdir()) == ['featured.jpg', 'image-1.png', 'index.md']

        page = (content_dir(config) / 'pages' / 'about.md').read_text(encoding='utf-8')
        assert page == '---\ntitle: "About"\ndate: 2022-05-01\n---\n\nAbout us\n'

        assert report['collections']['posts']['exported'] == 1
        assert report['collections']['pages']['exported'] == 1
        assert report['summary']['images_downloaded'] == 2
        assert report['summary']['images_external'] == 1
        assert report['summary']['total_errors'] == 0

    def test_posts_are_fetched_before_pages(self, config, site):
        MigrationOrchestrator(config, client=site).run()

        assert [kind for kind, _ in site.collection_calls] == ['posts', 'pages']

    def test_collections_can_be_limited(self, config, site):
        MigrationOrchestrator(config, client=site).run(collections=['pages'])

        assert [kind for kind, _ in site.collection_calls] == ['pages']
        assert not (content_dir(config) / 'posts' / 'hello-world').exists()

    def test_rerun_produces_identical_output(self, config, site):
        MigrationOrchestrator(config, client=site).run()
        index = content_dir(config) / 'posts' / 'hello-world' / 'index.md'
        first = index.read_bytes()

        MigrationOrchestrator(config, client=site).run()

        assert index.read_bytes() == first

    def test_dry_run_writes_and_downloads_nothing(self, config, site):
        config['migration']['dry_run'] = True

        report = MigrationOrchestrator(config, client=site).run()

        assert site.downloads == []
        assert not content_dir(config).exists()
        assert report['summary']['dry_run'] is True
        assert report['collections']['posts']['planned'] == 1
        assert report['collections']['pages']['planned'] == 1

    def test_fetch_error_is_fatal(self, config):
        client = FakeWordPressClient(fetch_error=FetchError('Failed to fetch posts: 500', status_code=500))

        with pytest.raises(FetchError):
            MigrationOrchestrator(config, client=client).run()

    def test_failed_image_keeps_remote_url(self, config):
        body = f'<p><img src="{UPLOADS}/gone.jpg" alt="gone"></p>'
        client = FakeWordPressClient(
            collections={'posts': [make_post(body=body, featured=False)]},
            failing_urls=[f"{UPLOADS}/gone.jpg"]
        )

        report = MigrationOrchestrator(config, client=client).run(collections=['posts'])

        index = (content_dir(config) / 'posts' / 'hello-world' / 'index.md').read_text(encoding='utf-8')
        assert f'![gone]({UPLOADS}/gone.jpg)' in index
        assert 'featured:' not in index
        assert report['collections']['posts']['exported'] == 1
        assert report['summary']['images_failed'] == 1


class TestItemIsolation:

    def test_item_failure_does_not_stop_siblings(self, config):
        client = FakeWordPressClient(collections={'posts': [
            make_post(slug='broken', featured=False, body='<p>a</p>'),
            make_post(slug='fine', featured=False, body='<p>b</p>'),
        ]})
        orchestrator = MigrationOrchestrator(config, client=client)

        with patch.object(orchestrator.converter, 'convert_standalone_html', side_effect=[RuntimeError('boom'), 'b']):
            report = orchestrator.run(collections=['posts'])

        assert report['collections']['posts'] == {
            'total': 2, 'exported': 1, 'planned': 0, 'failed': 1, 'skipped': 0
        }
        assert report['errors'] == [{'slug': 'broken', 'kind': 'posts', 'error': 'boom'}]
        assert (content_dir(config) / 'posts' / 'fine' / 'index.md').exists()

    def test_unsafe_slug_is_skipped(self, config):
        client = FakeWordPressClient(collections={'pages': [dict(PAGE, slug='../escape')]})

        report = MigrationOrchestrator(config, client=client).run(collections=['pages'])

        assert report['collections']['pages']['skipped'] == 1
        assert not (content_dir(config) / 'escape.md').exists()

    def test_parallel_workers_keep_order(self, config):
        slugs = [f"post-{n}" for n in range(6)]
        client = FakeWordPressClient(collections={'posts': [
            make_post(slug=slug, featured=False, body=f'<img src="{UPLOADS}/{slug}.gif">') for slug in slugs
        ]})
        config['migration']['max_workers'] = 3

        report = MigrationOrchestrator(config, client=client).run(collections=['posts'])

        assert [item['slug'] for item in report['items']] == slugs
        for slug in slugs:
            index = (content_dir(config) / 'posts' / slug / 'index.md').read_text(encoding='utf-8')
            assert '![](./image-1.gif)' in index


class TestMigrationReport:

    def test_console_report(self, config, site):
        report = MigrationOrchestrator(config, client=site).run()

        text = MigrationReport().format_console_report(report)

        assert 'Migration complete!' in text
        assert 'Posts: 1/1' in text
        assert 'Pages: 1/1' in text
        assert 'Next steps:' in text

    def test_dry_run_title(self):
        report = MigrationReport().generate_report([], 0.0, dry_run=True)

        assert 'Migration preview (dry run)' in MigrationReport().format_console_report(report)

    def test_json_export(self, config, site, tmp_path):
        report = MigrationOrchestrator(config, client=site).run()
        path = tmp_path / 'reports' / 'migration.json'

        MigrationReport().export_json_report(report, str(path))

        assert '"total_items": 2' in path.read_text(encoding='utf-8')

    def test_next_steps_end_with_preview(self):
        text = MigrationReport().format_console_report(MigrationReport().generate_report([], 0.0))

        assert text.endswith("5. Run the site's dev server and preview the migrated content")
