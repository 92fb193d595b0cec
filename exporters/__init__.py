"""Export package for writing migrated WordPress content to disk.

Package Structure:
- asset_rehomer: Downloads featured and inline images next to each post and
  rewrites the body to reference the local copies
- markdown_exporter: Builds front matter and writes ``index.md`` / ``<slug>.md``

Configuration Referenced:
- export.content_directory, export.posts_directory, export.pages_directory
- images.download_featured, images.download_inline, images.allowed_hosts
"""

from .asset_rehomer import AssetRehomer, extract_image_urls, get_extension, get_featured_image_url
from .markdown_exporter import MarkdownExporter, build_page_front_matter, build_post_front_matter

__all__ = [
    'AssetRehomer',
    'MarkdownExporter',
    'build_post_front_matter',
    'build_page_front_matter',
    'extract_image_urls',
    'get_extension',
    'get_featured_image_url'
]
