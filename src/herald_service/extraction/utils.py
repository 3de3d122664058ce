"""Text normalization and URL helpers for extraction."""

import html
import re
import unicodedata
from urllib.parse import urljoin


def clean_text(text: str | None) -> str:
    """Clean and normalize extracted text.

    - Normalizes Unicode
    - Removes control characters
    - Normalizes whitespace and line endings

    Args:
        text: Raw extracted text

    Returns:
        Cleaned text
    """
    if not text:
        return ""

    # Unicode normalization (NFC form)
    text = unicodedata.normalize("NFC", text)

    # Remove control characters except newlines and tabs
    text = "".join(char for char in text if unicodedata.category(char) != "Cc" or char in "\n\t")

    text = normalize_whitespace(text)

    return text.strip()


def normalize_whitespace(text: str) -> str:
    """Normalize whitespace in text.

    - Replaces multiple spaces with single space
    - Replaces multiple newlines with double newline (paragraph break)
    - Removes trailing whitespace from lines
    """
    text = text.replace("\t", " ")

    lines = [line.rstrip() for line in text.split("\n")]
    text = "\n".join(lines)

    text = re.sub(r" +", " ", text)

    # Replace 3+ newlines with double newline
    text = re.sub(r"\n{3,}", "\n\n", text)

    return text


def text_to_html(text: str) -> str:
    """Wrap plain text paragraphs (blank-line separated) in ``<p>`` tags."""
    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", text) if p.strip()]
    return "\n".join(f"<p>{html.escape(p).replace(chr(10), '<br>')}</p>" for p in paragraphs)


def make_absolute(url: str, base_url: str) -> str:
    """Resolve protocol-relative and relative URLs against the page URL."""
    url = url.strip()
    if url.startswith(("http://", "https://")):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    return urljoin(base_url, url)


def strip_site_suffix(title: str) -> str:
    """Remove a trailing ``| Site Name`` from a page title."""
    return re.sub(r"\s*\|[^|]*$", "", title).strip() or title.strip()
