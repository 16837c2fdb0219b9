"""Tests for the flat-file document store."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from helpbot.config.errors import ErrorCode, StorageError

from .store import FileDocumentStore, identifier_for_url, parse_document, url_from_identifier

URL = "https://help.example.com/account/password?lang=en"

LEGACY_PAGE = """
<!DOCTYPE html>
<html>
<head><title>VPN Setup</title></head>
<body>
  <h1>VPN Setup</h1>
  <div class="metadata">
    <p>Source: <a href="https://help.example.com/vpn">https://help.example.com/vpn</a></p>
    <p>Crawled: 2024-03-01T10:00:00.000Z</p>
  </div>
  <div class="content">
    <h2>Connecting</h2>
    <p>Install the corporate client and sign in.</p>
  </div>
</body>
</html>
"""


@pytest.fixture
def store(tmp_path: Path) -> FileDocumentStore:
    return FileDocumentStore(tmp_path / "knowledge-base")


# --- Identifiers ---


def test_identifier_round_trip() -> None:
    """Test identifiers are file-safe and decode to the URL."""
    identifier = identifier_for_url(URL)
    assert identifier.endswith(".html")
    assert "/" not in identifier and "=" not in identifier and "+" not in identifier
    assert url_from_identifier(identifier) == URL


def test_url_from_foreign_identifier() -> None:
    """Test names not produced by identifier_for_url decode to None."""
    assert url_from_identifier("notes.txt") is None
    assert url_from_identifier("%%%.html") is None


# --- Parsing ---


def test_parse_legacy_page() -> None:
    """Test pages written in the original layout parse fully."""
    doc = parse_document("legacy.html", LEGACY_PAGE)
    assert doc is not None
    assert doc.title == "VPN Setup"
    assert doc.url == "https://help.example.com/vpn"
    assert doc.crawled_at == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
    assert "Connecting" in doc.body
    assert "Install the corporate client" in doc.body
    assert "Source:" not in doc.body


def test_parse_page_without_content() -> None:
    """Test a page with no content block is skipped."""
    assert parse_document("x.html", "<html><title>Empty</title><body></body></html>") is None
    assert parse_document("x.html", '<div class="content">   </div>') is None


# --- Store ---


async def test_missing_directory_is_empty(store: FileDocumentStore) -> None:
    """Test an absent knowledge base reads as empty."""
    assert await store.all_documents() == []
    assert await store.list_entries() == []


async def test_save_and_read(store: FileDocumentStore) -> None:
    """Test saved pages are searchable documents."""
    entry = await store.save(
        "Password <Reset>",
        URL,
        "To reset your password, open the portal.\n\nLinks expire after 24 hours.",
    )

    assert entry.identifier == identifier_for_url(URL)
    documents = await store.all_documents()
    assert len(documents) == 1
    doc = documents[0]
    assert doc.title == "Password <Reset>"
    assert doc.url == URL
    assert "open the portal" in doc.body
    assert "24 hours" in doc.body
    assert doc.crawled_at == entry.crawled_at

    assert await store.get_body(entry.identifier) == doc.body


async def test_save_same_url_replaces(store: FileDocumentStore) -> None:
    """Test re-saving a URL overwrites the page."""
    await store.save("Old", URL, "old text")
    await store.save("New", URL, "new text")
    documents = await store.all_documents()
    assert [d.title for d in documents] == ["New"]


async def test_list_entries_newest_first(store: FileDocumentStore) -> None:
    """Test entries are ordered by crawl time descending."""
    await store.save("First", "https://a.example.com", "a", datetime(2024, 1, 1, tzinfo=timezone.utc))
    await store.save("Third", "https://c.example.com", "c", datetime(2024, 3, 1, tzinfo=timezone.utc))
    await store.save("Second", "https://b.example.com", "b", datetime(2024, 2, 1, tzinfo=timezone.utc))

    entries = await store.list_entries()

    assert [e.title for e in entries] == ["Third", "Second", "First"]


async def test_get_missing_document(store: FileDocumentStore) -> None:
    """Test unknown identifiers read as None."""
    assert await store.get_document(identifier_for_url("https://nowhere.example.com")) is None
    assert await store.get_body("missing.html") is None


async def test_delete(store: FileDocumentStore) -> None:
    """Test deleted pages disappear."""
    entry = await store.save("Page", URL, "text")
    await store.delete(entry.identifier)
    assert await store.all_documents() == []


async def test_delete_missing(store: FileDocumentStore) -> None:
    """Test deleting an unknown page raises NOT_FOUND."""
    with pytest.raises(StorageError) as exc_info:
        await store.delete("missing.html")
    assert exc_info.value.code == ErrorCode.NOT_FOUND


@pytest.mark.parametrize("identifier", ["../secret.html", "sub/page.html", "page.txt", ".hidden.html"])
async def test_invalid_identifiers(store: FileDocumentStore, identifier: str) -> None:
    """Test path-like identifiers are rejected."""
    with pytest.raises(StorageError) as exc_info:
        await store.get_document(identifier)
    assert exc_info.value.code == ErrorCode.VALIDATION_ERROR


async def test_unparseable_pages_are_skipped(store: FileDocumentStore) -> None:
    """Test pages without content do not become documents."""
    store.directory.mkdir(parents=True)
    (store.directory / "blank.html").write_text("<html><body>nothing</body></html>")
    (store.directory / "legacy.html").write_text(LEGACY_PAGE)

    documents = await store.all_documents()

    assert [d.identifier for d in documents] == ["legacy.html"]
