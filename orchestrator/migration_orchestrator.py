"""
Migration orchestrator for coordinating the complete migration pipeline.

Sequences Fetch → (per item) Rehome assets → Convert → Emit for posts, and
Fetch → Convert → Emit for pages, then builds the migration report.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional

from converters import MarkdownConverter
from exporters import AssetRehomer, MarkdownExporter
from fetchers import ApiFetcher, BaseFetcher, WordPressClient
from logger import ProgressTracker, log_section
from models import ItemKind, MigrationStatus, RehomeResult, RemoteItem
from orchestrator.migration_report import MigrationReport

class MigrationOrchestrator:
    """Central coordinator for the WordPress to Markdown migration."""

    def __init__(
        self,
        config: Dict[str, Any],
        client=None,
        fetcher: Optional[BaseFetcher] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize migration orchestrator.

        Args:
            config: Configuration dictionary
            client: Object providing ``get_collection`` and ``download``; built
                from config when omitted
            fetcher: Optional fetcher override
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger('wp_markdown_migrator.orchestrator')

        self.client = client or WordPressClient.from_config(config)
        self.fetcher = fetcher or ApiFetcher(config, client=self.client)
        self.converter = MarkdownConverter(config=config)
        self.rehomer = AssetRehomer(config, self.client)
        self.exporter = MarkdownExporter(config)
        self.report_generator = MigrationReport()

        migration_config = config.get('migration', {})
        self.dry_run = migration_config.get('dry_run', False)
        self.max_workers = migration_config.get('max_workers', 1)
        self.collections = migration_config.get('collections') or [kind.value for kind in ItemKind]

        self.logger.debug(
            f"MigrationOrchestrator initialized: dry_run={self.dry_run}, max_workers={self.max_workers}"
        )

    def run(self, collections: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Migrate the requested collections.

        Args:
            collections: Collection names, defaults to ``migration.collections``

        Returns:
            Migration report dictionary

        Raises:
            FetchError: If a collection's item list cannot be retrieved
        """
        start_time = time.time()
        statuses: List[MigrationStatus] = []

        self.exporter.prepare_directories()

        for name in collections or self.collections:
            kind = ItemKind(name)
            items = self.fetcher.fetch_items(kind)
            statuses.extend(self.migrate_items(kind, items))

        duration = time.time() - start_time
        return self.report_generator.generate_report(
            statuses,
            duration,
            image_stats=self.rehomer.get_stats(),
            dry_run=self.dry_run
        )

    def migrate_items(self, kind: ItemKind, items: List[RemoteItem]) -> List[MigrationStatus]:
        """Migrate one collection's items. Per-item failures never stop the batch."""
        handler = self.migrate_post if kind == ItemKind.POSTS else self.migrate_page
        statuses: List[MigrationStatus] = []

        log_section(f"Migrating {len(items)} {kind.value}")

        with ProgressTracker(total_items=len(items), item_type=kind.value) as tracker:
            if self.max_workers > 1 and len(items) > 1:
                with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                    futures = [executor.submit(self._migrate_safely, handler, item) for item in items]
                    for future in futures:
                        status = future.result()
                        statuses.append(status)
                        tracker.record(status.status, status.slug)
            else:
                for item in items:
                    status = self._migrate_safely(handler, item)
                    statuses.append(status)
                    tracker.record(status.status, status.slug)

        return statuses

    def migrate_post(self, item: RemoteItem) -> MigrationStatus:
        """
        Rehome a post's images, convert its body and write ``<slug>/index.md``.

        Args:
            item: Post to migrate

        Returns:
            MigrationStatus for the post
        """
        self.logger.info(f"  [POST] {item.slug}")
        post_dir = self.exporter.post_directory(item.slug)

        if self.dry_run:
            result = RehomeResult(body_html=item.body_html)
        else:
            post_dir.mkdir(parents=True, exist_ok=True)
            result = self.rehomer.rehome(item, post_dir)

        markdown = self.converter.convert_standalone_html(result.body_html)
        featured_alt = (item.featured_media or {}).get('alt_text') or ''
        document = self.exporter.build_post_document(item, markdown, result.featured, featured_alt)
        path = self.exporter.write_document(document)

        return MigrationStatus(
            slug=item.slug,
            kind=item.kind,
            status='planned' if self.dry_run else 'exported',
            path=str(path),
            images_downloaded=result.downloaded,
            images_failed=result.failed
        )

    def migrate_page(self, item: RemoteItem) -> MigrationStatus:
        """Convert a page and write ``<slug>.md``. Pages get no asset rehoming."""
        self.logger.info(f"  [PAGE] {item.slug}")

        markdown = self.converter.convert_standalone_html(item.body_html)
        document = self.exporter.build_page_document(item, markdown)
        path = self.exporter.write_document(document)

        return MigrationStatus(
            slug=item.slug,
            kind=item.kind,
            status='planned' if self.dry_run else 'exported',
            path=str(path)
        )

    def _migrate_safely(
        self,
        handler: Callable[[RemoteItem], MigrationStatus],
        item: RemoteItem
    ) -> MigrationStatus:
        if not _is_safe_slug(item.slug):
            self.logger.warning(f"  Skipping {item.kind.value[:-1]} with unusable slug: {item.slug!r}")
            return MigrationStatus(
                slug=item.slug,
                kind=item.kind,
                status='skipped',
                error_message='Slug cannot be used as a file name'
            )

        try:
            return handler(item)
        except Exception as e:
            self.logger.error(f"  Failed to migrate {item.kind.value[:-1]} '{item.slug}': {e}")
            self.logger.debug("Traceback:", exc_info=True)
            return MigrationStatus(
                slug=item.slug,
                kind=item.kind,
                status='failed',
                error_message=str(e)
            )


def _is_safe_slug(slug: str) -> bool:
    return bool(slug) and slug not in ('.', '..') and '/' not in slug and '\\' not in slug
