"""Data models for the WordPress to Markdown migration pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class ItemKind(Enum):
    """WordPress REST collections handled by the migration."""
    POSTS = "posts"
    PAGES = "pages"


@dataclass
class RemoteItem:
    """A post or page as returned by the WordPress REST API."""

    slug: str
    title_html: str
    body_html: str
    date: str
    kind: ItemKind = ItemKind.POSTS
    excerpt_html: str = ''
    modified: Optional[str] = None
    featured_media: Optional[Dict[str, Any]] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any], kind: ItemKind) -> 'RemoteItem':
        """
        Build an item from one element of a ``/wp/v2/posts`` or ``/wp/v2/pages`` response.

        Args:
            data: Decoded JSON object
            kind: Collection the object came from

        Returns:
            RemoteItem instance
        """
        featured_media = None
        excerpt_html = ''
        modified = None

        if kind == ItemKind.POSTS:
            excerpt_html = _rendered(data.get('excerpt'))
            modified = data.get('modified')
            embedded = data.get('_embedded') or {}
            media_list = embedded.get('wp:featuredmedia') or []
            if media_list and isinstance(media_list[0], dict):
                featured_media = media_list[0]

        return cls(
            slug=data.get('slug') or '',
            title_html=_rendered(data.get('title')),
            body_html=_rendered(data.get('content')),
            date=data.get('date') or '',
            kind=kind,
            excerpt_html=excerpt_html,
            modified=modified,
            featured_media=featured_media
        )


def _rendered(value: Any) -> str:
    """Return the ``rendered`` member of a WordPress rendered field."""
    if isinstance(value, dict):
        return value.get('rendered') or ''
    if isinstance(value, str):
        return value
    return ''


@dataclass
class LocalAsset:
    """An image downloaded next to the document that references it."""

    source_url: str
    local_filename: str
    local_path: Path

    @property
    def reference(self) -> str:
        """Relative reference used inside the document."""
        return f"./{self.local_filename}"


@dataclass
class RehomeResult:
    """Outcome of rehoming the images of a single item."""

    body_html: str
    featured: Optional[LocalAsset] = None
    inline: List[LocalAsset] = field(default_factory=list)
    failed: int = 0
    skipped_external: int = 0

    @property
    def downloaded(self) -> int:
        return len(self.inline) + (1 if self.featured else 0)


@dataclass
class FrontMatter:
    """
    Front matter of an output document.

    Field order is fixed so output stays diff-stable: title, description,
    date, modified, featured, featuredAlt, draft. ``None`` fields are omitted.
    """

    title: str
    date: str
    description: Optional[str] = None
    modified: Optional[str] = None
    featured: Optional[str] = None
    featured_alt: Optional[str] = None
    draft: Optional[bool] = None

    def lines(self) -> List[str]:
        lines = [f'title: "{self.title}"']
        if self.description:
            lines.append(f'description: "{self.description}"')
        lines.append(f'date: {self.date}')
        if self.modified:
            lines.append(f'modified: {self.modified}')
        if self.featured:
            lines.append(f'featured: {self.featured}')
            lines.append(f'featuredAlt: "{self.featured_alt or ""}"')
        if self.draft is not None:
            lines.append(f'draft: {"true" if self.draft else "false"}')
        return lines

    def render(self) -> str:
        return '\n'.join(['---', *self.lines(), '---'])


@dataclass
class OutputDocument:
    """Final Markdown document ready to be written to disk."""

    path: Path
    front_matter: FrontMatter
    body_markdown: str

    def render(self) -> str:
        return f"{self.front_matter.render()}\n\n{self.body_markdown}\n"


@dataclass
class MigrationStatus:
    """Tracks per-item migration outcome for reporting."""

    slug: str
    kind: ItemKind
    status: str  # "exported", "planned", "failed", "skipped"
    path: Optional[str] = None
    images_downloaded: int = 0
    images_failed: int = 0
    error_message: Optional[str] = None
    timestamp: Optional[str] = None

    def __post_init__(self) -> None:
        """Set timestamp if not provided."""
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'slug': self.slug,
            'kind': self.kind.value,
            'status': self.status,
            'path': self.path,
            'images_downloaded': self.images_downloaded,
            'images_failed': self.images_failed,
            'error_message': self.error_message,
            'timestamp': self.timestamp
        }


__all__ = [
    'ItemKind',
    'RemoteItem',
    'LocalAsset',
    'RehomeResult',
    'FrontMatter',
    'OutputDocument',
    'MigrationStatus'
]
