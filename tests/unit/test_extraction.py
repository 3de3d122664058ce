"""Tests for page fetching, metadata extraction and URL import."""

import asyncio
from datetime import UTC, datetime, timedelta

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from herald_service.extraction import (
    ContentTooLargeError,
    EmptyContentError,
    ExtractionPipeline,
    ExtractionResult,
    HTMLExtractor,
    NetworkError,
    PageMetadata,
    PipelineConfig,
    RateLimitError,
    clean_text,
    extract_business_images,
    extract_page_metadata,
    import_article_from_url,
    make_absolute,
)
from herald_service.extraction.html_extractor import parse_datetime
from herald_service.extraction.pipeline import DEFAULT_RETRY_AFTER_SECONDS, parse_retry_after
from herald_service.extraction.utils import strip_site_suffix, text_to_html
from herald_service.models import Article, Category, Profile

PARAGRAPH = (
    "The harbour board approved a twelve million dollar upgrade on Tuesday, "
    "promising new berths for the fishing fleet and a public boardwalk along the quay."
)

ARTICLE_PAGE = f"""
<html>
<head>
  <title>Harbour upgrade approved | Coastal Times</title>
  <meta name="description" content="Board signs off on the harbour plan.">
  <meta property="og:image" content="/images/harbour.jpg">
  <meta property="og:site_name" content="Coastal Times">
</head>
<body>
  <nav><a href="/">Home</a></nav>
  <article>
    <h1>Harbour upgrade approved</h1>
    <time datetime="2026-03-04T09:15:00Z">4 March</time>
    <p>{PARAGRAPH}</p>
    <p>Construction starts in spring and is expected to take two years, with the old
    ferry terminal closing for six months while the new berths are poured.</p>
    <p>Local fishers welcomed the decision but asked the board to keep the slipway
    open to small boats for the whole of the build.</p>
  </article>
</body>
</html>
"""


def pipeline_with(
    handler, monkeypatch: pytest.MonkeyPatch, **config  # type: ignore[no-untyped-def]
) -> ExtractionPipeline:
    """Pipeline whose HTTP client is served by ``handler``."""
    pipeline = ExtractionPipeline(PipelineConfig(**config))
    monkeypatch.setattr(
        pipeline,
        "_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    return pipeline


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record backoff delays instead of sleeping."""
    delays: list[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return delays


class TestUtils:
    def test_clean_text(self) -> None:
        assert clean_text("  a\tb \x00c\n\n\n\nd  ") == "a b c\n\nd"
        assert clean_text(None) == ""

    def test_text_to_html(self) -> None:
        assert text_to_html("One <b>\nline\n\nTwo") == "<p>One &lt;b&gt;<br>line</p>\n<p>Two</p>"

    def test_make_absolute(self) -> None:
        base = "https://news.example.com/a/story"
        assert make_absolute("/img/x.jpg", base) == "https://news.example.com/img/x.jpg"
        assert make_absolute("x.jpg", base) == "https://news.example.com/a/x.jpg"
        assert make_absolute("//cdn.example.com/x.jpg", base) == "https://cdn.example.com/x.jpg"
        assert make_absolute("http://other.example.com/x.jpg", base) == "http://other.example.com/x.jpg"

    def test_strip_site_suffix(self) -> None:
        assert strip_site_suffix("Harbour upgrade | Coastal Times") == "Harbour upgrade"
        assert strip_site_suffix("No suffix") == "No suffix"

    def test_parse_datetime(self) -> None:
        assert parse_datetime("2026-03-04T09:15:00Z") == datetime(2026, 3, 4, 9, 15, tzinfo=UTC)
        assert parse_datetime("2026-03-04T09:15:00") == datetime(2026, 3, 4, 9, 15, tzinfo=UTC)
        assert parse_datetime("yesterday") is None
        assert parse_datetime(None) is None


class TestPageMetadata:
    def test_reads_head(self) -> None:
        meta = extract_page_metadata(ARTICLE_PAGE, "https://coastal.example.com/news/harbour")

        assert meta.title == "Harbour upgrade approved"
        assert meta.description == "Board signs off on the harbour plan."
        assert meta.featured_image == "https://coastal.example.com/images/harbour.jpg"
        assert meta.published_at == datetime(2026, 3, 4, 9, 15, tzinfo=UTC)
        assert meta.site_name == "Coastal Times"

    def test_fallbacks(self) -> None:
        html = """
        <html><head>
          <meta property="og:title" content="From Open Graph">
          <meta property="og:description" content="OG description">
          <meta property="article:published_time" content="2026-01-02T03:04:05+00:00">
        </head><body><img src="lead.png"></body></html>
        """

        meta = extract_page_metadata(html, "https://example.com/posts/1")

        assert meta.title == "From Open Graph"
        assert meta.description == "OG description"
        assert meta.featured_image == "https://example.com/posts/lead.png"
        assert meta.published_at == datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert meta.site_name is None


class TestHTMLExtractor:
    async def test_extracts_article(self) -> None:
        result = await HTMLExtractor().extract(
            ARTICLE_PAGE.encode(), "https://coastal.example.com/news/harbour"
        )

        assert "twelve million dollar upgrade" in result.content
        assert result.content_html.startswith("<p>")
        assert result.title == "Harbour upgrade approved"
        assert result.published_date == datetime(2026, 3, 4, 9, 15, tzinfo=UTC)
        assert result.word_count > 30

    async def test_empty_page(self) -> None:
        with pytest.raises(EmptyContentError):
            await HTMLExtractor().extract("<html><body><p>Hi</p></body></html>", "https://x.test/")


class TestPipelineFetch:
    async def test_success(self, monkeypatch: pytest.MonkeyPatch) -> None:
        pipeline = pipeline_with(
            lambda request: httpx.Response(200, content=b"<html></html>"), monkeypatch
        )

        content, final_url = await pipeline.fetch("https://example.com/page")

        assert content == b"<html></html>"
        assert final_url == "https://example.com/page"

    async def test_retries_server_errors(
        self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float]
    ) -> None:
        responses = iter([httpx.Response(502), httpx.Response(503), httpx.Response(200, text="ok")])
        pipeline = pipeline_with(lambda request: next(responses), monkeypatch)

        content, _ = await pipeline.fetch("https://example.com/page")

        assert content == b"ok"
        assert sleeps == [1, 2]

    async def test_gives_up_after_retries(
        self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float]
    ) -> None:
        pipeline = pipeline_with(lambda request: httpx.Response(500), monkeypatch, max_retries=2)

        with pytest.raises(NetworkError, match="Server error 500"):
            await pipeline.fetch("https://example.com/page")
        assert sleeps == [1]

    async def test_client_error_not_retried(
        self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float]
    ) -> None:
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            return httpx.Response(404)

        pipeline = pipeline_with(handler, monkeypatch)

        with pytest.raises(NetworkError, match="HTTP error 404"):
            await pipeline.fetch("https://example.com/missing")
        assert len(calls) == 1
        assert sleeps == []

    async def test_rate_limited(self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float]) -> None:
        pipeline = pipeline_with(
            lambda request: httpx.Response(429, headers={"Retry-After": "7"}), monkeypatch
        )

        with pytest.raises(RateLimitError):
            await pipeline.fetch("https://example.com/page")
        assert sleeps == [7, 7]

    async def test_rate_limited_with_http_date(
        self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float]
    ) -> None:
        pipeline = pipeline_with(
            lambda request: httpx.Response(
                429, headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"}
            ),
            monkeypatch,
        )

        with pytest.raises(RateLimitError):
            await pipeline.fetch("https://example.com/page")
        assert sleeps == [0.0, 0.0]

    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            (None, DEFAULT_RETRY_AFTER_SECONDS),
            ("7", 7.0),
            ("1.5", 1.5),
            ("-3", 0.0),
            ("inf", DEFAULT_RETRY_AFTER_SECONDS),
            ("soon", DEFAULT_RETRY_AFTER_SECONDS),
            ("Wed, 21 Oct 2015 07:28:00 GMT", 0.0),
        ],
    )
    def test_parse_retry_after(self, header: str | None, expected: float) -> None:
        assert parse_retry_after(header) == expected

    def test_parse_retry_after_future_date(self) -> None:
        retry_at = datetime.now(UTC) + timedelta(seconds=120)
        header = retry_at.strftime("%a, %d %b %Y %H:%M:%S GMT")

        assert 100 < parse_retry_after(header) <= 120

    async def test_connection_error(
        self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float]
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        pipeline = pipeline_with(handler, monkeypatch, max_retries=1)

        with pytest.raises(NetworkError, match="Request error"):
            await pipeline.fetch("https://example.com/page")

    async def test_content_too_large(self, monkeypatch: pytest.MonkeyPatch) -> None:
        pipeline = pipeline_with(
            lambda request: httpx.Response(200, content=b"x" * 10), monkeypatch, max_content_size_mb=0
        )

        with pytest.raises(ContentTooLargeError):
            await pipeline.fetch("https://example.com/huge")


class TestBusinessImages:
    def test_logo_and_cover(self) -> None:
        html = """
        <img class="brand" src="/assets/mark.svg">
        <section style="background-image: url('/img/banner-shop.jpg')"></section>
        <img src="/img/shelves.jpg">
        <img src="/img/favicon.png">
        """

        images = extract_business_images(html, "https://shop.example.com/")

        assert images.logo_url == "https://shop.example.com/assets/mark.svg"
        assert images.cover_url == "https://shop.example.com/img/banner-shop.jpg"
        assert images.all_images == [
            "https://shop.example.com/img/banner-shop.jpg",
            "https://shop.example.com/img/shelves.jpg",
        ]

    def test_cover_falls_back_to_logo(self) -> None:
        images = extract_business_images('<img alt="Logo" src="/l.gif">', "https://x.example.com/")

        assert images.all_images == []
        assert images.cover_url == images.logo_url == "https://x.example.com/l.gif"


class StubPipeline:
    """Returns a canned extraction result and counts calls."""

    def __init__(self, result: ExtractionResult) -> None:
        self.result = result
        self.calls: list[str] = []

    async def extract(self, url: str) -> ExtractionResult:
        self.calls.append(url)
        return self.result


def scraped(title: str = "Harbour upgrade approved") -> ExtractionResult:
    return ExtractionResult(
        content=PARAGRAPH,
        content_html=f"<p>{PARAGRAPH}</p><script>track()</script>",
        title=title,
        published_date=datetime(2026, 3, 4, 9, 15, tzinfo=UTC),
        page=PageMetadata(
            description="Board signs off on the harbour plan.",
            featured_image="https://coastal.example.com/images/harbour.jpg",
        ),
    )


class TestImportArticle:
    async def test_creates_published_article(self, db_session: AsyncSession) -> None:
        db_session.add_all(
            [
                Category(name="Business", slug="business"),
                Category(name="Local News", slug="local-news"),
                Profile(email="writer@example.com", role="author"),
            ]
        )
        await db_session.commit()
        pipeline = StubPipeline(scraped())

        result = await import_article_from_url(
            db_session,
            "https://coastal.example.com/news/harbour",
            author_email="Writer@Example.com",
            pipeline=pipeline,  # type: ignore[arg-type]
        )

        assert result.created is True
        assert result.slug == "harbour-upgrade-approved"
        article = await db_session.get(Article, result.article_id)
        assert article is not None
        assert article.status == "published"
        assert article.content == f"<p>{PARAGRAPH}</p>"
        assert article.excerpt == "Board signs off on the harbour plan."
        assert article.featured_image_url == "https://coastal.example.com/images/harbour.jpg"
        assert article.article_metadata["external_url"] == "https://coastal.example.com/news/harbour"
        assert article.author_id is not None

        category = await db_session.get(Category, article.category_id)
        assert category is not None
        assert category.slug == "local-news"

    async def test_skips_known_url(self, db_session: AsyncSession) -> None:
        url = "https://coastal.example.com/news/harbour"
        pipeline = StubPipeline(scraped())

        first = await import_article_from_url(db_session, url, pipeline=pipeline)  # type: ignore[arg-type]
        second = await import_article_from_url(db_session, url, pipeline=pipeline)  # type: ignore[arg-type]

        assert first.created is True
        assert second.created is False
        assert second.reason == "already imported"
        assert second.slug == first.slug
        assert pipeline.calls == [url]

    async def test_explicit_category_and_unique_slug(self, db_session: AsyncSession) -> None:
        db_session.add_all(
            [
                Category(name="Business", slug="business"),
                Article(title="Existing", slug="harbour-upgrade-approved", content="<p>x</p>"),
            ]
        )
        await db_session.commit()

        result = await import_article_from_url(
            db_session,
            "https://coastal.example.com/other",
            author_email="nobody@example.com",
            category_slug="business",
            pipeline=StubPipeline(scraped()),  # type: ignore[arg-type]
        )

        assert result.slug == "harbour-upgrade-approved-1"
        row = await db_session.execute(
            select(Article.author_id, Article.category_id).where(Article.id == result.article_id)
        )
        author_id, category_id = row.one()
        assert author_id is None
        assert category_id is not None
