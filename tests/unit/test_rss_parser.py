"""Tests for feed parsing and download."""

from datetime import UTC, datetime

import httpx
import pytest

from herald_service.rss.exceptions import FeedFetchError, FeedParseError
from herald_service.rss.parser import FeedItem, fetch_feed, parse_feed

RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>Coastal Times</title>
    <link>https://news.example.com</link>
    <description>Local news from the coast</description>
    <language>en-za</language>
    <copyright>Coastal Times Media</copyright>
    <image>
      <url>https://news.example.com/logo.png</url>
      <title>Coastal Times</title>
      <link>https://news.example.com</link>
    </image>
    <item>
      <title>  Harbour upgrade approved  </title>
      <link>https://news.example.com/harbour</link>
      <guid isPermaLink="false">story-1</guid>
      <pubDate>Tue, 15 Oct 2024 08:30:00 GMT</pubDate>
      <description>Council approves the harbour plan.</description>
      <content:encoded><![CDATA[<p>The council approved the harbour upgrade.</p>]]></content:encoded>
      <category>Local</category>
      <category>Infrastructure</category>
      <media:content url="https://news.example.com/harbour.jpg" medium="image" />
      <media:thumbnail url="https://news.example.com/harbour-thumb.jpg" />
    </item>
    <item>
      <title>Podcast episode</title>
      <link>https://news.example.com/podcast-12</link>
      <description>Weekly round-up</description>
      <enclosure url="https://news.example.com/ep12.mp3" type="audio/mpeg" length="1000" />
    </item>
  </channel>
</rss>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Tech Notes</title>
  <subtitle>Engineering updates</subtitle>
  <id>urn:uuid:feed</id>
  <updated>2024-10-01T12:00:00Z</updated>
  <entry>
    <title>Release 2.0</title>
    <link href="https://tech.example.com/release-2"/>
    <id>urn:uuid:entry-1</id>
    <updated>2024-10-01T12:00:00Z</updated>
    <summary>New release</summary>
  </entry>
</feed>
"""


class TestParseFeed:
    def test_channel_metadata(self) -> None:
        feed = parse_feed(RSS_FEED)

        assert feed.title == "Coastal Times"
        assert feed.description == "Local news from the coast"
        assert feed.language == "en-za"
        assert feed.copyright == "Coastal Times Media"
        assert feed.image_url == "https://news.example.com/logo.png"
        assert len(feed.items) == 2

    def test_item_fields(self) -> None:
        item = parse_feed(RSS_FEED).items[0]

        assert item.title == "Harbour upgrade approved"
        assert item.link == "https://news.example.com/harbour"
        assert item.guid == "story-1"
        assert item.published_at == datetime(2024, 10, 15, 8, 30, tzinfo=UTC)
        assert item.pub_date is not None
        assert item.description == "Council approves the harbour plan."
        assert item.content == "<p>The council approved the harbour upgrade.</p>"
        assert item.categories == ["Local", "Infrastructure"]
        assert item.media_content_url == "https://news.example.com/harbour.jpg"
        assert item.media_thumbnail_url == "https://news.example.com/harbour-thumb.jpg"

    def test_enclosure_and_guid_fallback(self) -> None:
        item = parse_feed(RSS_FEED).items[1]

        assert item.guid == "https://news.example.com/podcast-12"
        assert item.enclosure_url == "https://news.example.com/ep12.mp3"
        assert item.enclosure_type == "audio/mpeg"
        assert item.published_at is None
        assert item.content is None

    def test_atom_feed(self) -> None:
        feed = parse_feed(ATOM_FEED)

        assert feed.title == "Tech Notes"
        assert feed.description == "Engineering updates"
        item = feed.items[0]
        assert item.guid == "urn:uuid:entry-1"
        assert item.link == "https://tech.example.com/release-2"
        assert item.published_at == datetime(2024, 10, 1, 12, 0, tzinfo=UTC)

    def test_not_a_feed(self) -> None:
        with pytest.raises(FeedParseError):
            parse_feed(b"this is not a feed at all")


def test_feed_item_guid_defaults_to_link() -> None:
    assert FeedItem(link="https://example.com/a").guid == "https://example.com/a"
    assert FeedItem(link="https://example.com/a", guid="g-1").guid == "g-1"


class TestFetchFeed:
    async def test_fetch_success(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url == "https://news.example.com/rss"
            return httpx.Response(200, content=RSS_FEED)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            feed = await fetch_feed("https://news.example.com/rss", client=client)

        assert feed.title == "Coastal Times"
        assert len(feed.items) == 2

    async def test_http_error(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(503))

        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(FeedFetchError, match="HTTP 503"):
                await fetch_feed("https://news.example.com/rss", client=client)

    async def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(FeedFetchError, match="Error fetching"):
                await fetch_feed("https://news.example.com/rss", client=client)

    async def test_invalid_body(self) -> None:
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, content=b"this is not a feed at all")
        )

        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(FeedParseError):
                await fetch_feed("https://news.example.com/rss", client=client)
