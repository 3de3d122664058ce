"""URL slug helpers."""

import re

_STRIP_RE = re.compile(r"[^\w\s-]", re.ASCII)
_SEPARATOR_RE = re.compile(r"[\s_-]+")


def create_slug(text: str, max_length: int = 100) -> str:
    """Create a URL-friendly slug.

    Lowercases, drops punctuation and non-ASCII characters, collapses runs
    of whitespace, underscores and hyphens into one hyphen and trims
    hyphens from both ends.

    Args:
        text: Source text (usually a title or name)
        max_length: Maximum slug length

    Returns:
        Slug, possibly empty when the text has no usable characters

    Example:
        >>> create_slug("Hello, World! 2024")
        'hello-world-2024'
    """
    slug = _STRIP_RE.sub("", text.lower())
    slug = _SEPARATOR_RE.sub("-", slug).strip("-")
    return slug[:max_length].rstrip("-")
