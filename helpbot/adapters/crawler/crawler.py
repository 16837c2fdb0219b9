"""
Page Crawler - Fetches web pages into the knowledge base.

Features:
- Browser-like request headers, redirects followed
- Retry of transient transport errors (tenacity)
- Boilerplate removal and main-content selection (bs4)
- Placeholder page when a site cannot be fetched
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from helpbot.adapters.filestore import FileDocumentStore
from helpbot.config.errors import CrawlError, ValidationError

from .models import CrawledPage, IngestResult

logger = logging.getLogger(__name__)

__all__ = ["KnowledgeBaseService", "PageCrawler", "extract_page", "fallback_page", "validate_url"]

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Cache-Control": "max-age=0",
}

BOILERPLATE_TAGS = ["script", "style", "nav", "footer", "header", "aside", "iframe"]
MAIN_CONTENT_SELECTOR = "main, article, .content, #content, .main"

_WHITESPACE = re.compile(r"\s+")


def validate_url(url: str) -> str:
    """
    Check a URL is absolute http(s).

    Raises:
        ValidationError: If the scheme or host is missing
    """
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Invalid URL: {url!r}", details={"url": url})
    return url


def extract_page(url: str, markup: str) -> CrawledPage:
    """
    Extract title and readable text from HTML.

    Raises:
        CrawlError: If the page has no readable text
    """
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(BOILERPLATE_TAGS):
        tag.decompose()

    title = soup.title.get_text(strip=True) if soup.title else ""
    main = soup.select_one(MAIN_CONTENT_SELECTOR) or soup.body or soup

    lines = (_WHITESPACE.sub(" ", line).strip() for line in main.get_text("\n").splitlines())
    body = "\n\n".join(line for line in lines if line)
    if not body:
        raise CrawlError("Page has no readable content", details={"url": url})

    return CrawledPage(title=title or "Untitled", url=url, body=body)


def fallback_page(url: str, error: Exception) -> CrawledPage:
    """Placeholder stored when a site cannot be crawled."""
    host = urlparse(url).hostname or "Website"
    body = (
        f"This is a placeholder for the website {url} which could not be crawled automatically.\n\n"
        "The website may have security measures that prevent automated crawling.\n\n"
        f"Error: {str(error) or 'Unknown error'}"
    )
    return CrawledPage(title=host, url=url, body=body, is_fallback=True)


class PageCrawler:
    """
    HTTP page fetcher.

    Example:
        >>> crawler = PageCrawler()
        >>> page = await crawler.crawl("https://help.example.com/password")
        >>> page.title
        'Password Reset'
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_attempts: int = 3,
        wait: wait_base | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize crawler.

        Args:
            timeout: Request timeout in seconds
            max_attempts: Attempts for transient transport errors
            wait: tenacity wait strategy between attempts
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout
        self.max_attempts = max_attempts
        self._wait = wait or wait_exponential(multiplier=1, min=1, max=10)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=DEFAULT_HEADERS,
                timeout=self.timeout,
                follow_redirects=True,
                max_redirects=5,
                transport=self._transport,
            )
        return self._client

    async def fetch(self, url: str) -> str:
        """
        GET a page, retrying transport errors.

        Raises:
            httpx.HTTPStatusError: On status >= 400
            httpx.TransportError: When all attempts fail
        """
        client = await self._get_client()
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            reraise=True,
        ):
            with attempt:
                response = await client.get(url)
                response.raise_for_status()
        return response.text

    async def crawl(self, url: str) -> CrawledPage:
        """
        Fetch and extract a page.

        Fetch or extraction failures produce a placeholder page.

        Raises:
            ValidationError: If the URL is not absolute http(s)
        """
        url = validate_url(url)
        logger.info("Crawling %s", url)

        try:
            markup = await self.fetch(url)
            page = extract_page(url, markup)
        except (httpx.HTTPError, CrawlError) as e:
            logger.warning("Crawl of %s failed, storing placeholder: %s", url, e)
            return fallback_page(url, e)

        logger.info("Crawled %s: '%s' (%d chars)", url, page.title, len(page.body))
        return page

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


class KnowledgeBaseService:
    """
    Crawl-and-store ingestion.

    Example:
        >>> service = KnowledgeBaseService(PageCrawler(), FileDocumentStore("knowledge-base"))
        >>> result = await service.ingest("https://help.example.com/password")
    """

    def __init__(self, crawler: PageCrawler, store: FileDocumentStore) -> None:
        self.crawler = crawler
        self.store = store

    async def ingest(self, url: str) -> IngestResult:
        page = await self.crawler.crawl(url)
        entry = await self.store.save(page.title, page.url, page.body)
        return IngestResult(entry=entry, is_fallback=page.is_fallback)
