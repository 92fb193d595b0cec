"""HTML to Markdown conversion for WordPress post and page bodies."""

import logging
import re
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup
from markdownify import MarkdownConverter as MarkdownifyConverter

logger = logging.getLogger('wp_markdown_migrator.converters.markdown_converter')

YOUTUBE_EMBED_PATTERN = re.compile(r'embed/([^?]+)')
YOUTUBE_WATCH_URL = 'https://www.youtube.com/watch?v={video_id}'
IMAGE_BLOCK_CLASS = 'wp-block-image'


class MarkdownConverter(MarkdownifyConverter):
    """
    Converts WordPress HTML to Markdown.

    Extends markdownify.MarkdownConverter with two rules that run before the
    default element handling:
    - iframes become a "Watch on YouTube" link, or nothing
    - Gutenberg image blocks become an image plus an italic caption line
    Everything else uses markdownify's standard rules.
    """

    def __init__(self, logger: logging.Logger = None, config: Dict[str, Any] = None, **kwargs):
        """Initialize markdown converter with logger and configuration."""
        markdownify_options = {
            'heading_style': 'ATX',
            'bullets': '-',
        }
        markdownify_options.update(kwargs)

        super().__init__(**markdownify_options)

        self.logger = logger or logging.getLogger('wp_markdown_migrator.converters.markdown_converter')
        self.config = config or {}

    def convert_standalone_html(self, html_content: str) -> str:
        """
        Convert an HTML fragment to Markdown.

        Args:
            html_content: HTML body (possibly with image URLs already rewritten)

        Returns:
            Markdown text without leading or trailing blank lines
        """
        if not html_content or not html_content.strip():
            return ''

        soup = BeautifulSoup(html_content, 'lxml')
        markdown = self.convert_soup(soup)
        return self._final_cleanup(markdown)

    def convert_iframe(self, el, text, parent_tags=None, **kwargs):
        """Replace YouTube embeds with a link, drop any other iframe."""
        src = el.get('src') or ''
        if 'youtube' in src:
            match = YOUTUBE_EMBED_PATTERN.search(src)
            if match:
                url = YOUTUBE_WATCH_URL.format(video_id=match.group(1))
                return f"\n\n[Watch on YouTube]({url})\n\n"
        self.logger.debug(f"Dropping iframe: {src or '(no src)'}")
        return ''

    def convert_figure(self, el, text, parent_tags=None, **kwargs):
        """Render image blocks as an image with an optional italic caption."""
        if IMAGE_BLOCK_CLASS not in (el.get('class') or []):
            return text

        img = el.find('img')
        if img is None:
            return ''

        src = img.get('src') or ''
        alt = img.get('alt') or ''
        figcaption = el.find('figcaption')
        caption = figcaption.get_text().strip() if figcaption else ''

        result = f"![{alt}]({src})"
        if caption:
            result += f"\n*{caption}*"
        return f"\n\n{result}\n\n"

    def _final_cleanup(self, markdown: str) -> str:
        """Collapse runs of blank lines and trim the ends."""
        markdown = re.sub(r'\n{3,}', '\n\n', markdown)
        return markdown.strip()


def convert_html(html_content: str, config: Optional[Dict[str, Any]] = None) -> str:
    """Convenience wrapper around MarkdownConverter.convert_standalone_html."""
    return MarkdownConverter(config=config).convert_standalone_html(html_content)
