"""Plain-text helpers for front matter fields."""

import re

TAG_PATTERN = re.compile(r'<[^>]+>')
WHITESPACE_PATTERN = re.compile(r'\s+')

# Decoded in this order, after tags are stripped
ENTITY_REPLACEMENTS = (
    ('&amp;', '&'),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&quot;', '"'),
    ('&#039;', "'"),
    ('&nbsp;', ' '),
)

DESCRIPTION_MAX_LENGTH = 200


def strip_html(html_content: str) -> str:
    """
    Reduce an HTML fragment to a single line of plain text.

    Only the entities WordPress commonly emits in titles and excerpts are
    decoded; anything else is left as-is.

    Args:
        html_content: HTML fragment (title or excerpt)

    Returns:
        Plain text with collapsed whitespace
    """
    if not html_content:
        return ''

    text = TAG_PATTERN.sub('', html_content)
    for entity, replacement in ENTITY_REPLACEMENTS:
        text = text.replace(entity, replacement)
    return WHITESPACE_PATTERN.sub(' ', text).strip()


def escape_quotes(text: str) -> str:
    """Backslash-escape double quotes for a quoted front matter value."""
    return text.replace('"', '\\"')


def truncate(text: str, max_length: int = DESCRIPTION_MAX_LENGTH) -> str:
    """Hard cut at ``max_length`` characters."""
    return text[:max_length]


def date_only(timestamp: str) -> str:
    """Return the calendar date part of an ISO 8601 timestamp."""
    return (timestamp or '').split('T')[0]


__all__ = ['strip_html', 'escape_quotes', 'truncate', 'date_only', 'DESCRIPTION_MAX_LENGTH']
