"""Content helpers shared by the API, the RSS pipeline and the scraper.

Usage:
    from herald_service.content import clean_content, create_slug, extract_excerpt

    html = clean_content(raw_html)
    slug = create_slug(title)
    excerpt = extract_excerpt(html)
"""

from .extract import (
    estimate_reading_time,
    extract_excerpt,
    extract_image,
    extract_tags,
    first_image_src,
)
from .sanitize import clean_content, html_to_text, sanitize_html, sanitize_text
from .slug import create_slug

__all__ = [
    # Slugs
    "create_slug",
    # Sanitization
    "clean_content",
    "sanitize_html",
    "sanitize_text",
    "html_to_text",
    # Derived fields
    "extract_excerpt",
    "extract_tags",
    "extract_image",
    "first_image_src",
    "estimate_reading_time",
]
