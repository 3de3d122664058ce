"""Derived article fields: excerpts, tags, featured images and reading time."""

import math
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup

from .sanitize import html_to_text

if TYPE_CHECKING:
    from herald_service.rss.parser import FeedItem

# Runs of capitalized words, e.g. "Cape Town" or "Parliament"
_KEYWORD_RE = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b")


def extract_excerpt(html: str, max_length: int = 200) -> str:
    """Build a plain text excerpt.

    Text longer than ``max_length`` is cut at the last space inside the
    limit (or hard cut when there is none) and ``...`` is appended.
    """
    text = html_to_text(html)
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        return truncated[:last_space] + "..."
    return truncated + "..."


def extract_tags(
    title: str | None,
    description: str | None,
    categories: Iterable[str] = (),
    limit: int = 10,
) -> list[str]:
    """Derive lowercase tags for an imported item.

    Feed categories come first, then capitalized word runs found in the
    title and description whose length is between 4 and 19 characters.
    Order is preserved and duplicates are dropped.

    Args:
        title: Item title
        description: Item description (HTML allowed, matched as-is)
        categories: Categories reported by the feed
        limit: Maximum number of tags

    Returns:
        Up to ``limit`` tags
    """
    tags: dict[str, None] = {}

    for category in categories:
        if category and category.strip():
            tags[category.strip().lower()] = None

    text = f"{title or ''} {description or ''}"
    for keyword in _KEYWORD_RE.findall(text):
        if 3 < len(keyword) < 20:
            tags[keyword.lower()] = None

    return list(tags)[:limit]


def first_image_src(html: str | None) -> str | None:
    """First absolute ``<img src>`` in an HTML fragment."""
    if not html:
        return None
    img = BeautifulSoup(html, "html.parser").find("img")
    if img is None:
        return None
    src = img.get("src")
    if isinstance(src, str) and src.startswith("http"):
        return src
    return None


def extract_image(item: "FeedItem") -> str | None:
    """Pick the featured image for a feed item.

    Preference: ``media:content``, ``media:thumbnail``, an image
    enclosure, the first absolute image in the content, then in the
    description.
    """
    if item.media_content_url:
        return item.media_content_url
    if item.media_thumbnail_url:
        return item.media_thumbnail_url
    if item.enclosure_url and (item.enclosure_type or "").startswith("image/"):
        return item.enclosure_url

    return first_image_src(item.content) or first_image_src(item.description)


def estimate_reading_time(html: str, wpm: int = 200) -> int:
    """Estimate reading time in whole minutes (at least 1)."""
    word_count = len(html_to_text(html).split())
    return max(1, math.ceil(word_count / wpm))
