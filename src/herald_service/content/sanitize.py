"""HTML cleaning and sanitization.

Two allowlists are used:

- Imported content (RSS items, scraped pages) keeps basic formatting,
  links and images: ``clean_content``.
- Editor input is stricter and keeps no attributes at all:
  ``sanitize_html``.

Everything is done with BeautifulSoup: noisy elements are removed
outright, disallowed tags are unwrapped (their text is kept) and
attributes outside the allowlist are dropped.
"""

import re

from bs4 import BeautifulSoup, Tag

# Removed together with their content
NOISE_SELECTORS: tuple[str, ...] = (
    "script, style, iframe, object, embed, form, input, button",
    'div[class*="ad"], div[id*="ad"], .advertisement, .ads',
    '[style*="display: none"], [style*="visibility: hidden"]',
    'img[width="1"], img[height="1"], img[src*="pixel"], img[src*="beacon"]',
    'div[class*="social"], div[class*="share"], div[class*="follow"]',
)

CONTENT_ALLOWED_TAGS = frozenset(
    {
        "p",
        "br",
        "strong",
        "b",
        "em",
        "i",
        "u",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "ul",
        "ol",
        "li",
        "blockquote",
        "a",
        "img",
    }
)
CONTENT_ALLOWED_ATTRS = frozenset({"href", "src", "alt", "title", "target"})

EDITOR_ALLOWED_TAGS = frozenset(
    {
        "p",
        "br",
        "strong",
        "em",
        "u",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "ul",
        "ol",
        "li",
        "blockquote",
    }
)

# Dropped with their content even when not matched by a noise selector
FORBIDDEN_TAGS = frozenset({"script", "style", "object", "embed", "base", "link", "template"})

URL_ATTRS = frozenset({"href", "src"})

_EVENT_HANDLER_RE = re.compile(r"on\w+=", re.IGNORECASE)
_JAVASCRIPT_RE = re.compile(r"javascript:", re.IGNORECASE)


def _is_unsafe_url(value: str) -> bool:
    # Browsers ignore embedded whitespace/control chars in the scheme
    compact = re.sub(r"[\s\x00-\x1f]+", "", value).lower()
    return compact.startswith(("javascript:", "vbscript:", "data:text/html"))


def _remove(tag: Tag) -> None:
    if not tag.decomposed:
        tag.decompose()


def _apply_allowlist(
    soup: BeautifulSoup,
    allowed_tags: frozenset[str],
    allowed_attrs: frozenset[str],
) -> None:
    for tag in soup.find_all(sorted(FORBIDDEN_TAGS)):
        _remove(tag)

    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        if tag.name not in allowed_tags:
            tag.unwrap()
            continue

        kept: dict[str, str] = {}
        for name, value in tag.attrs.items():
            if name not in allowed_attrs:
                continue
            if isinstance(value, list):
                value = " ".join(value)
            if name in URL_ATTRS and _is_unsafe_url(value):
                continue
            kept[name] = value
        tag.attrs = kept


def clean_content(html: str | None) -> str:
    """Clean third-party HTML for storage as article content.

    Removes scripts, embeds, forms, ad containers, hidden elements,
    tracking pixels and social widgets, then sanitizes to the content
    allowlist (``data-*`` attributes and ``javascript:`` URLs never survive).

    Args:
        html: Untrusted HTML fragment

    Returns:
        Sanitized HTML, or ``""`` for empty input
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for selector in NOISE_SELECTORS:
        for tag in soup.select(selector):
            _remove(tag)

    _apply_allowlist(soup, CONTENT_ALLOWED_TAGS, CONTENT_ALLOWED_ATTRS)
    return str(soup).strip()


def sanitize_html(html: str | None) -> str:
    """Sanitize editor-supplied HTML to basic formatting tags with no attributes."""
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    _apply_allowlist(soup, EDITOR_ALLOWED_TAGS, frozenset())
    return str(soup).strip()


def sanitize_text(text: str) -> str:
    """Strip markup-ish fragments from a plain text field.

    Removes angle brackets, ``javascript:`` and ``on<event>=`` handler
    prefixes, then trims surrounding whitespace.
    """
    text = text.replace("<", "").replace(">", "")
    text = _JAVASCRIPT_RE.sub("", text)
    text = _EVENT_HANDLER_RE.sub("", text)
    return text.strip()


def html_to_text(html: str | None) -> str:
    """Plain text of an HTML fragment with whitespace collapsed."""
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(" ")
    return " ".join(text.split())
