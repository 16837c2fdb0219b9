"""
Knowledge Routes - Crawl, list, search, and delete knowledge base pages.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from helpbot.adapters.crawler import KnowledgeBaseService
from helpbot.adapters.filestore import FileDocumentStore, KnowledgeEntry
from helpbot.config.errors import RetrievalError
from helpbot.domains.retrieval import KnowledgeSearch, highlight_snippet
from helpbot.interfaces.api.deps import (
    get_document_store,
    get_knowledge_search,
    get_knowledge_service,
)

router = APIRouter()


class KnowledgeListResponse(BaseModel):
    """Stored pages, newest first."""

    entries: list[KnowledgeEntry]
    count: int
    message: str | None = None


class CrawlRequest(BaseModel):
    """Crawl request body."""

    url: str = Field(..., min_length=1, description="Page to add to the knowledge base")


class CrawlResponse(BaseModel):
    """Crawl result."""

    success: bool = True
    entry: KnowledgeEntry
    is_fallback: bool = False


class SearchRequest(BaseModel):
    """Search request body."""

    query: str = Field(..., min_length=1, description="Search query")
    limit: int = Field(default=20, ge=1, le=100)


class SearchResultItem(BaseModel):
    """Single search result with highlighted snippet."""

    identifier: str
    title: str
    url: str
    snippet: str
    relevance: float
    matched_terms: list[str]


class SearchResponse(BaseModel):
    """Search response."""

    query: str
    terms: list[str]
    results: list[SearchResultItem]
    total: int


class DeleteResponse(BaseModel):
    """Delete result."""

    success: bool = True
    message: str


@router.get("", response_model=KnowledgeListResponse)
async def list_entries(
    store: FileDocumentStore = Depends(get_document_store),
) -> KnowledgeListResponse:
    """List stored pages, newest first."""
    entries = await store.list_entries()
    return KnowledgeListResponse(
        entries=entries,
        count=len(entries),
        message=None if entries else "Knowledge base is empty",
    )


@router.post("/crawl", response_model=CrawlResponse)
async def crawl(
    request: CrawlRequest,
    service: KnowledgeBaseService = Depends(get_knowledge_service),
) -> CrawlResponse:
    """
    Fetch a page and store it.

    Unreachable pages are stored as placeholders (is_fallback=true).
    """
    result = await service.ingest(request.url)
    return CrawlResponse(entry=result.entry, is_fallback=result.is_fallback)


@router.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    knowledge_search: KnowledgeSearch = Depends(get_knowledge_search),
) -> SearchResponse:
    """Keyword search with matched terms wrapped in <strong>."""
    if not request.query.strip():
        raise RetrievalError("Search query is blank")
    outcome = await knowledge_search.search(request.query)
    results = [
        SearchResultItem(
            identifier=r.identifier,
            title=r.title,
            url=r.url,
            snippet=highlight_snippet(r.snippet, r.matched_terms),
            relevance=r.relevance,
            matched_terms=r.matched_terms,
        )
        for r in outcome.results[: request.limit]
    ]
    return SearchResponse(
        query=request.query,
        terms=list(outcome.terms.terms),
        results=results,
        total=len(outcome.results),
    )


@router.delete("/{identifier}", response_model=DeleteResponse)
async def delete_entry(
    identifier: str,
    store: FileDocumentStore = Depends(get_document_store),
) -> DeleteResponse:
    """Delete a stored page (404 if it does not exist)."""
    await store.delete(identifier)
    return DeleteResponse(message="Entry deleted from knowledge base")
