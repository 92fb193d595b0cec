"""Converters package for WordPress HTML to Markdown conversion."""

from .markdown_converter import MarkdownConverter, convert_html
from .text_utils import date_only, escape_quotes, strip_html, truncate

__all__ = [
    'MarkdownConverter',
    'convert_html',
    'strip_html',
    'escape_quotes',
    'truncate',
    'date_only'
]
