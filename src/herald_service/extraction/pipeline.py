"""Web page fetching and extraction orchestration."""

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

import httpx

from herald_service.config import settings

from .base import ExtractionResult
from .exceptions import ContentTooLargeError, NetworkError, RateLimitError
from .html_extractor import HTMLExtractor

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 5.0


def parse_retry_after(value: str | None) -> float:
    """Seconds to wait from a `Retry-After` header.

    Accepts delay-seconds or an HTTP-date. Missing or malformed values give
    the default delay; dates in the past give zero.
    """
    if value is None:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        return max(seconds, 0.0) if math.isfinite(seconds) else DEFAULT_RETRY_AFTER_SECONDS
    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER_SECONDS
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=UTC)
    return max((retry_at - datetime.now(UTC)).total_seconds(), 0.0)


@dataclass
class PipelineConfig:
    """Configuration for the extraction pipeline.

    Attributes:
        timeout_seconds: HTTP request timeout
        max_retries: Maximum attempts for transient failures
        max_content_size_mb: Maximum page size
        user_agent: User-Agent header for requests
    """

    timeout_seconds: int = 30
    max_retries: int = 3
    max_content_size_mb: int = 20
    user_agent: str = "HeraldScraper/1.0 (Content Import Bot)"

    @property
    def max_content_size_bytes(self) -> int:
        """Get max content size in bytes."""
        return self.max_content_size_mb * 1024 * 1024

    @classmethod
    def from_settings(cls) -> "PipelineConfig":
        return cls(
            timeout_seconds=settings.extraction_timeout_seconds,
            max_retries=settings.extraction_max_retries,
            max_content_size_mb=settings.extraction_max_content_size_mb,
            user_agent=settings.extraction_user_agent,
        )


class ExtractionPipeline:
    """Fetch a web page and extract its article.

    Retry policy:
    - 429: wait ``Retry-After`` seconds (default 5), then retry
    - 5xx, timeouts and connection errors: exponential backoff (1s, 2s, 4s...)
    - Other 4xx: fail immediately with NetworkError
    """

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self.config = config or PipelineConfig.from_settings()
        self._html_extractor = HTMLExtractor()

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": self.config.user_agent},
        )

    async def fetch(self, url: str) -> tuple[bytes, str]:
        """Fetch raw page bytes.

        Returns:
            Tuple of (content bytes, final URL after redirects)
        """
        async with self._client() as client:
            return await self._fetch_with_retry(client, url)

    async def extract(self, url: str) -> ExtractionResult:
        """Fetch a page and extract its article content.

        Args:
            url: Page URL

        Returns:
            ExtractionResult with content and page metadata

        Raises:
            NetworkError: If the page cannot be fetched
            RateLimitError: If still rate limited after all retries
            ContentTooLargeError: If the page exceeds the size limit
            EmptyContentError: If no article body could be extracted
        """
        content, final_url = await self.fetch(url)
        logger.info(f"Fetched {final_url} ({len(content)} bytes)")
        return await self._html_extractor.extract(content, final_url)

    async def _fetch_with_retry(
        self,
        client: httpx.AsyncClient,
        url: str,
    ) -> tuple[bytes, str]:
        """Fetch content with retry logic.

        Implements exponential backoff for transient failures.

        Raises:
            RateLimitError: If rate limited by server
            ContentTooLargeError: If content exceeds size limit
            NetworkError: If all retries exhausted
        """
        last_error: Exception | None = None

        for attempt in range(self.config.max_retries):
            try:
                response = await client.get(url)

                if response.status_code == 429:
                    retry_after = parse_retry_after(response.headers.get("Retry-After"))
                    if attempt < self.config.max_retries - 1:
                        await asyncio.sleep(retry_after)
                        continue
                    raise RateLimitError(f"Rate limited by {url}")

                response.raise_for_status()

                content_length = len(response.content)
                if content_length > self.config.max_content_size_bytes:
                    raise ContentTooLargeError(
                        f"Content size {content_length} exceeds limit "
                        f"{self.config.max_content_size_bytes}"
                    )

                return response.content, str(response.url)

            except httpx.TimeoutException as e:
                last_error = NetworkError(f"Timeout fetching {url}: {e}")
                if attempt < self.config.max_retries - 1:
                    await asyncio.sleep(2**attempt)  # Exponential backoff
            except httpx.HTTPStatusError as e:
                if e.response.status_code >= 500:
                    last_error = NetworkError(f"Server error {e.response.status_code}: {e}")
                    if attempt < self.config.max_retries - 1:
                        await asyncio.sleep(2**attempt)
                else:
                    raise NetworkError(f"HTTP error {e.response.status_code}: {e}") from e
            except httpx.RequestError as e:
                last_error = NetworkError(f"Request error: {e}")
                if attempt < self.config.max_retries - 1:
                    await asyncio.sleep(2**attempt)

        raise last_error or NetworkError(f"Failed to fetch {url}")
