"""
File Document Store - One HTML file per knowledge base page.

Features:
- Reversible file names derived from the page URL
- bs4 parsing of title, source link, crawl time, and content
- Async API over blocking file I/O (asyncio.to_thread)
- Listing newest first
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import html
import logging
import re
from datetime import datetime, timezone
from pathlib import Path

from bs4 import BeautifulSoup

from helpbot.config.errors import ErrorCode, StorageError
from helpbot.domains.retrieval import Document

from .models import KnowledgeEntry

logger = logging.getLogger(__name__)

__all__ = [
    "FileDocumentStore",
    "identifier_for_url",
    "parse_document",
    "render_document",
    "url_from_identifier",
]

_IDENTIFIER = re.compile(r"^[A-Za-z0-9_\-][A-Za-z0-9_\-.]*\.html$")
_BASE64_NAME = re.compile(r"^[A-Za-z0-9_\-]+$")

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <title>{title}</title>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body>
  <h1>{title}</h1>
  <div class="metadata">
    <p>Source: <a href="{url}">{url}</a></p>
    <p>Crawled: {crawled_at}</p>
  </div>
  <div class="content">
{paragraphs}
  </div>
</body>
</html>
"""


def identifier_for_url(url: str) -> str:
    """File name for a URL: URL-safe base64 without padding plus .html."""
    encoded = base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii").rstrip("=")
    return f"{encoded}.html"


def url_from_identifier(identifier: str) -> str | None:
    """Recover the URL from a file name, or None if it was not produced by identifier_for_url."""
    if not identifier.endswith(".html"):
        return None
    encoded = identifier[: -len(".html")]
    if not encoded or not _BASE64_NAME.match(encoded):
        return None
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        return None


def _parse_timestamp(text: str) -> datetime | None:
    text = text.strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def render_document(title: str, url: str, body: str, crawled_at: datetime) -> str:
    """
    Render a page in the stored HTML layout.

    Blank-line separated blocks of body become paragraphs.
    """
    blocks = [b.strip() for b in re.split(r"\n\s*\n", body) if b.strip()]
    paragraphs = "\n".join(f"    <p>{html.escape(b)}</p>" for b in blocks)
    return _PAGE_TEMPLATE.format(
        title=html.escape(title),
        url=html.escape(url, quote=True),
        crawled_at=crawled_at.isoformat(),
        paragraphs=paragraphs,
    )


def parse_document(identifier: str, markup: str) -> Document | None:
    """
    Parse a stored page.

    Args:
        identifier: File name of the page
        markup: File contents

    Returns:
        Document, or None when the page has no content text
    """
    soup = BeautifulSoup(markup, "html.parser")

    content = soup.select_one(".content")
    if content is None:
        return None
    body = content.get_text("\n", strip=True)
    if not body:
        return None

    title = soup.title.get_text(strip=True) if soup.title else ""
    link = soup.select_one(".metadata a")
    url = (link.get("href") if link else None) or url_from_identifier(identifier) or ""

    crawled_at = None
    for paragraph in soup.select(".metadata p"):
        text = paragraph.get_text(strip=True)
        if text.startswith("Crawled:"):
            crawled_at = _parse_timestamp(text[len("Crawled:") :])
            break

    return Document(
        identifier=identifier,
        title=title or url,
        url=str(url),
        body=body,
        crawled_at=crawled_at,
    )


class FileDocumentStore:
    """
    Flat-file knowledge base.

    Example:
        >>> store = FileDocumentStore("knowledge-base")
        >>> entry = await store.save("Password Reset", "https://help.example.com/pw", "To reset...")
        >>> docs = await store.all_documents()
    """

    def __init__(self, directory: str | Path) -> None:
        """
        Initialize store.

        Args:
            directory: Directory holding the .html pages (created on first write)
        """
        self.directory = Path(directory)

    def _path(self, identifier: str) -> Path:
        if not _IDENTIFIER.match(identifier) or ".." in identifier:
            raise StorageError(
                f"Invalid knowledge base identifier: {identifier}",
                details={"identifier": identifier},
                code=ErrorCode.VALIDATION_ERROR,
            )
        return self.directory / identifier

    # --- Reads ---

    def _read_all(self) -> list[Document]:
        if not self.directory.is_dir():
            return []

        documents = []
        for path in sorted(self.directory.glob("*.html")):
            try:
                markup = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning("Skipping unreadable page %s: %s", path.name, e)
                continue
            document = parse_document(path.name, markup)
            if document is not None:
                documents.append(document)
        return documents

    def _read_one(self, identifier: str) -> Document | None:
        path = self._path(identifier)
        if not path.is_file():
            return None
        try:
            markup = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise StorageError(f"Could not read {identifier}: {e}", details={"identifier": identifier}) from e
        return parse_document(identifier, markup)

    async def all_documents(self) -> list[Document]:
        """All pages with non-empty content; a missing directory is an empty store."""
        documents = await asyncio.to_thread(self._read_all)
        logger.debug("Loaded %d documents from %s", len(documents), self.directory)
        return documents

    async def get_document(self, identifier: str) -> Document | None:
        return await asyncio.to_thread(self._read_one, identifier)

    async def get_body(self, identifier: str) -> str | None:
        document = await self.get_document(identifier)
        return document.body if document else None

    async def list_entries(self) -> list[KnowledgeEntry]:
        """Stored pages newest first; pages without a crawl time sort last."""
        documents = await self.all_documents()
        entries = [
            KnowledgeEntry(
                identifier=d.identifier,
                title=d.title,
                url=d.url,
                crawled_at=d.crawled_at,
            )
            for d in documents
        ]
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        entries.sort(key=lambda e: e.crawled_at or oldest, reverse=True)
        return entries

    # --- Writes ---

    def _write(self, identifier: str, markup: str) -> None:
        path = self._path(identifier)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(markup, encoding="utf-8")
        except OSError as e:
            raise StorageError(
                f"Could not write {identifier}: {e}",
                details={"identifier": identifier},
                code=ErrorCode.STORAGE_WRITE_FAILED,
            ) from e

    def _unlink(self, identifier: str) -> None:
        path = self._path(identifier)
        if not path.is_file():
            raise StorageError(
                f"Knowledge base entry not found: {identifier}",
                details={"identifier": identifier},
                code=ErrorCode.NOT_FOUND,
            )
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(
                f"Could not delete {identifier}: {e}",
                details={"identifier": identifier},
                code=ErrorCode.STORAGE_WRITE_FAILED,
            ) from e

    async def save(
        self,
        title: str,
        url: str,
        body: str,
        crawled_at: datetime | None = None,
    ) -> KnowledgeEntry:
        """
        Store a page, replacing any earlier copy of the same URL.

        Args:
            title: Page title
            url: Source URL (determines the identifier)
            body: Plain text content
            crawled_at: Crawl time (now if None)

        Returns:
            KnowledgeEntry for the stored page
        """
        crawled_at = crawled_at or datetime.now(timezone.utc)
        identifier = identifier_for_url(url)
        markup = render_document(title, url, body, crawled_at)

        await asyncio.to_thread(self._write, identifier, markup)
        logger.info("Stored %s as %s", url, identifier)
        return KnowledgeEntry(identifier=identifier, title=title, url=url, crawled_at=crawled_at)

    async def delete(self, identifier: str) -> None:
        """
        Remove a page.

        Raises:
            StorageError: NOT_FOUND if no such page, VALIDATION_ERROR if the identifier is unsafe
        """
        await asyncio.to_thread(self._unlink, identifier)
        logger.info("Deleted %s", identifier)
