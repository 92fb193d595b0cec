"""Document emitter: builds front matter and writes Markdown files."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from converters import date_only, escape_quotes, strip_html, truncate
from models import FrontMatter, ItemKind, LocalAsset, OutputDocument, RemoteItem


def build_post_front_matter(
    item: RemoteItem,
    featured: Optional[LocalAsset] = None,
    featured_alt: str = ''
) -> FrontMatter:
    """
    Synthesize post front matter.

    ``description`` only when the excerpt has text, ``modified`` only when it
    differs from ``date``, ``featured``/``featuredAlt`` only when a featured
    image was downloaded.
    """
    description = truncate(strip_html(item.excerpt_html))

    modified = None
    if item.modified and item.modified != item.date:
        modified = date_only(item.modified)

    return FrontMatter(
        title=escape_quotes(strip_html(item.title_html)),
        description=escape_quotes(description) if description else None,
        date=date_only(item.date),
        modified=modified,
        featured=featured.reference if featured else None,
        featured_alt=escape_quotes(strip_html(featured_alt)) if featured else None,
        draft=False
    )


def build_page_front_matter(item: RemoteItem) -> FrontMatter:
    """Pages carry only a title and a date."""
    return FrontMatter(
        title=escape_quotes(strip_html(item.title_html)),
        date=date_only(item.date)
    )


class MarkdownExporter:
    """
    Writes OutputDocuments below the content directory.

    Layout:
    - ``<content>/<posts>/<slug>/index.md`` with images next to it
    - ``<content>/<pages>/<slug>.md``

    Existing files are overwritten. Writes go through a temporary file in the
    target directory and ``os.replace`` so a half-written document is never
    visible.
    """

    def __init__(self, config: Dict[str, Any], logger: Optional[logging.Logger] = None, output_dir: Optional[str] = None):
        """
        Initialize the markdown exporter.

        Args:
            config: Configuration dictionary with export settings
            logger: Logger instance
            output_dir: Optional content directory override (takes precedence over config)
        """
        self.config = config
        self.logger = logger or logging.getLogger('wp_markdown_migrator.exporters.markdown_exporter')

        export_config = config.get('export', {})
        self.content_directory = Path(output_dir or export_config.get('content_directory', './src/content'))
        self.posts_directory = self.content_directory / export_config.get('posts_directory', 'posts')
        self.pages_directory = self.content_directory / export_config.get('pages_directory', 'pages')
        self.dry_run = config.get('migration', {}).get('dry_run', False)

    def post_directory(self, slug: str) -> Path:
        return self.posts_directory / slug

    def document_path(self, item: RemoteItem) -> Path:
        if item.kind == ItemKind.PAGES:
            return self.pages_directory / f"{item.slug}.md"
        return self.post_directory(item.slug) / 'index.md'

    def prepare_directories(self) -> None:
        """Create the posts and pages roots."""
        if self.dry_run:
            return
        self.posts_directory.mkdir(parents=True, exist_ok=True)
        self.pages_directory.mkdir(parents=True, exist_ok=True)

    def build_post_document(
        self,
        item: RemoteItem,
        body_markdown: str,
        featured: Optional[LocalAsset] = None,
        featured_alt: str = ''
    ) -> OutputDocument:
        return OutputDocument(
            path=self.document_path(item),
            front_matter=build_post_front_matter(item, featured, featured_alt),
            body_markdown=body_markdown
        )

    def build_page_document(self, item: RemoteItem, body_markdown: str) -> OutputDocument:
        return OutputDocument(
            path=self.document_path(item),
            front_matter=build_page_front_matter(item),
            body_markdown=body_markdown
        )

    def write_document(self, document: OutputDocument) -> Path:
        """
        Persist a document, replacing any previous version.

        Args:
            document: Document to write

        Returns:
            Path written (or that would be written in dry-run mode)
        """
        if self.dry_run:
            self.logger.info(f"    Would create: {self._display_path(document.path)}")
            return document.path

        document.path.parent.mkdir(parents=True, exist_ok=True)
        content = document.render()

        fd, tmp_name = tempfile.mkstemp(
            dir=document.path.parent, prefix=f".{document.path.name}.", suffix='.tmp'
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as f:
                f.write(content)
            # mkstemp creates 0600 files
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, document.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        self.logger.info(f"    Created: {self._display_path(document.path)}")
        return document.path

    def _display_path(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.content_directory))
        except ValueError:
            return str(path)
