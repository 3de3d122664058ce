"""Web page extraction module.

Provides article extraction from news pages and image discovery for
business websites.

Usage:
    from herald_service.extraction import ExtractionPipeline, PipelineConfig

    config = PipelineConfig(timeout_seconds=60)
    pipeline = ExtractionPipeline(config)

    result = await pipeline.extract("https://example.com/article")
    print(result.title, result.page.featured_image)
"""

from .base import ExtractionResult, PageMetadata
from .exceptions import (
    ContentTooLargeError,
    EmptyContentError,
    ExtractionError,
    NetworkError,
    RateLimitError,
)
from .html_extractor import HTMLExtractor, extract_page_metadata
from .images import BusinessImages, extract_business_images
from .importer import ImportResult, import_article_from_url
from .pipeline import ExtractionPipeline, PipelineConfig
from .utils import clean_text, make_absolute, normalize_whitespace

__all__ = [
    # Results
    "ExtractionResult",
    "PageMetadata",
    "BusinessImages",
    "ImportResult",
    # Extractors
    "HTMLExtractor",
    "extract_page_metadata",
    "extract_business_images",
    # Pipeline
    "ExtractionPipeline",
    "PipelineConfig",
    "import_article_from_url",
    # Exceptions
    "ExtractionError",
    "NetworkError",
    "EmptyContentError",
    "RateLimitError",
    "ContentTooLargeError",
    # Utilities
    "clean_text",
    "make_absolute",
    "normalize_whitespace",
]
