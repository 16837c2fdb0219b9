"""
Retrieval Contracts - Interfaces for retrieval domain.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import Document


@runtime_checkable
class DocumentSource(Protocol):
    """Contract for the document store as seen by search."""

    async def all_documents(self) -> list[Document]:
        """Return every searchable document in a stable order."""
        ...

    async def get_body(self, identifier: str) -> str | None:
        """Return the full body of one document, or None when unavailable."""
        ...

