"""
Crawler Models - Fetched pages and ingestion results.
"""

from __future__ import annotations

from pydantic import BaseModel

from helpbot.adapters.filestore import KnowledgeEntry


class CrawledPage(BaseModel):
    """Readable text of one web page."""

    title: str
    url: str
    body: str
    is_fallback: bool = False

    model_config = {"frozen": True}


class IngestResult(BaseModel):
    """Stored entry for a crawled URL."""

    entry: KnowledgeEntry
    is_fallback: bool = False
