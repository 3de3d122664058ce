"""Extraction result container."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class PageMetadata:
    """Metadata read from a page's ``<head>`` and markup.

    Attributes:
        title: Page title with a trailing ``| Site Name`` suffix removed
        description: ``<meta name="description">`` content
        featured_image: Absolute URL of the lead image
        published_at: Publication time from ``<time datetime>`` or
            ``article:published_time``
        site_name: ``og:site_name`` when present
    """

    title: str | None = None
    description: str | None = None
    featured_image: str | None = None
    published_at: datetime | None = None
    site_name: str | None = None


@dataclass
class ExtractionResult:
    """Result of extracting an article from a web page.

    Design Decision: Uses dataclass for simplicity.
    Alternative considered: Pydantic BaseModel (rejected to avoid mixing
    ORM and API concerns - this is internal to extraction logic).

    Attributes:
        url: Final URL after redirects
        content: Extracted article body as plain text
        content_html: Article body as simple HTML paragraphs
        title: Document/page title
        author: Author name (if available)
        published_date: Publication date (if available)
        language: Detected language code (e.g., 'en')
        word_count: Number of words in content
        page: Metadata read from the page markup
        metadata: Additional extractor metadata (sitename, tags, etc.)
        extraction_method: Which extractor was used (trafilatura, newspaper4k)
        extraction_time_ms: Time taken to extract (milliseconds)
        warnings: List of warnings during extraction
    """

    content: str
    url: str = ""
    content_html: str = ""
    title: str | None = None
    author: str | None = None
    published_date: datetime | None = None
    language: str | None = None
    word_count: int = 0
    page: PageMetadata = field(default_factory=PageMetadata)
    metadata: dict[str, Any] = field(default_factory=dict)
    extraction_method: str = ""
    extraction_time_ms: float = 0.0
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Calculate word count if not provided."""
        if not self.word_count and self.content:
            self.word_count = len(self.content.split())
