"""
File Store Models - Listing entries for stored knowledge base pages.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class KnowledgeEntry(BaseModel):
    """Stored page without its body."""

    identifier: str
    title: str
    url: str
    crawled_at: datetime | None = None

    model_config = {"frozen": True}
