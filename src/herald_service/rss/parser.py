"""Feed download and parsing.

Feeds are downloaded with httpx and parsed with feedparser, then mapped to
plain dataclasses so the rest of the pipeline never touches feedparser's
dict-like entries.

Field mapping (RSS 2.0 / Atom via feedparser):
    guid            -> entry.id (falls back to link)
    pub_date        -> entry.published (raw string)
    content         -> content:encoded / Atom content
    description     -> entry.summary
    categories      -> entry.tags[].term
    media_*_url     -> media:content / media:thumbnail
    enclosure_*     -> first enclosure link
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import feedparser
import httpx

from herald_service.config import settings

from .exceptions import FeedFetchError, FeedParseError

logger = logging.getLogger(__name__)


@dataclass
class FeedItem:
    """One entry of a parsed feed."""

    title: str | None = None
    link: str | None = None
    guid: str | None = None
    pub_date: str | None = None
    published_at: datetime | None = None
    content: str | None = None
    description: str | None = None
    categories: list[str] = field(default_factory=list)
    media_content_url: str | None = None
    media_thumbnail_url: str | None = None
    enclosure_url: str | None = None
    enclosure_type: str | None = None

    def __post_init__(self) -> None:
        if not self.guid:
            self.guid = self.link


@dataclass
class ParsedFeed:
    """Feed-level metadata plus its items."""

    title: str | None = None
    description: str | None = None
    language: str | None = None
    copyright: str | None = None
    image_url: str | None = None
    items: list[FeedItem] = field(default_factory=list)


def _first_url(values: Any) -> str | None:
    if not values:
        return None
    first = values[0]
    url = first.get("url") if hasattr(first, "get") else None
    return url or None


def _parse_date(parsed: Any) -> datetime | None:
    # feedparser normalizes dates to UTC struct_time
    if not parsed:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(parsed), tz=UTC)
    except (OverflowError, TypeError, ValueError):
        return None


def _entry_to_item(entry: Any) -> FeedItem:
    content_blocks = entry.get("content") or []
    content = content_blocks[0].get("value") if content_blocks else None

    enclosure_url = None
    enclosure_type = None
    enclosures = entry.get("enclosures") or []
    if enclosures:
        enclosure_url = enclosures[0].get("href") or enclosures[0].get("url")
        enclosure_type = enclosures[0].get("type")

    categories = [tag.get("term") for tag in entry.get("tags") or [] if tag.get("term")]

    title = entry.get("title")
    return FeedItem(
        title=title.strip() if title else None,
        link=entry.get("link"),
        guid=entry.get("id"),
        pub_date=entry.get("published") or entry.get("updated"),
        published_at=_parse_date(entry.get("published_parsed") or entry.get("updated_parsed")),
        content=content,
        description=entry.get("summary"),
        categories=categories,
        media_content_url=_first_url(entry.get("media_content")),
        media_thumbnail_url=_first_url(entry.get("media_thumbnail")),
        enclosure_url=enclosure_url,
        enclosure_type=enclosure_type,
    )


def parse_feed(document: bytes | str) -> ParsedFeed:
    """Parse a feed document.

    Args:
        document: Raw RSS/Atom XML

    Returns:
        ParsedFeed with metadata and items

    Raises:
        FeedParseError: If the document is not a feed (malformed and
            neither a title nor any entries could be recovered)
    """
    parsed = feedparser.parse(document)
    feed = parsed.get("feed", {})

    if parsed.get("bozo") and not parsed.entries and not feed.get("title"):
        raise FeedParseError(f"Not a valid feed: {parsed.get('bozo_exception')}")

    image = feed.get("image") or {}
    return ParsedFeed(
        title=feed.get("title"),
        description=feed.get("subtitle") or feed.get("description"),
        language=feed.get("language"),
        copyright=feed.get("rights"),
        image_url=image.get("href") or image.get("url"),
        items=[_entry_to_item(entry) for entry in parsed.entries],
    )


async def fetch_feed(url: str, client: httpx.AsyncClient | None = None) -> ParsedFeed:
    """Download and parse a feed.

    Args:
        url: Feed URL
        client: Optional client to reuse (a short-lived one is created otherwise)

    Returns:
        Parsed feed

    Raises:
        FeedFetchError: On network failures and non-2xx responses
        FeedParseError: If the body is not a feed
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            timeout=settings.rss_timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": settings.rss_user_agent},
        )

    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FeedFetchError(f"HTTP {e.response.status_code} fetching {url}") from e
    except httpx.HTTPError as e:
        raise FeedFetchError(f"Error fetching {url}: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    logger.debug(f"Fetched feed {url} ({len(response.content)} bytes)")
    return parse_feed(response.content)
