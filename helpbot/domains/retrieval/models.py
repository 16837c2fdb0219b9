"""
Retrieval Models - Data types for the retrieval domain.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Document(BaseModel):
    """Crawled page held by the document store."""

    identifier: str
    title: str
    url: str
    body: str
    crawled_at: datetime | None = None

    model_config = {"frozen": True}


class QueryTerms(BaseModel):
    """Significant terms extracted from a raw query."""

    terms: tuple[str, ...] = ()
    technical_terms: tuple[str, ...] = ()
    phrase: str | None = None  # only set for two or more plain terms

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not self.terms


class SearchResult(BaseModel):
    """Scored document for a single query."""

    identifier: str
    title: str
    url: str
    snippet: str
    relevance: float = Field(default=0.0, ge=0.0, le=1.0)
    matched_terms: list[str] = Field(default_factory=list)
    title_match_count: int = 0
    technical_match_count: int = 0
    exact_phrase: bool = False


class SearchOutcome(BaseModel):
    """Terms and ranked results of one knowledge search."""

    query: str
    terms: QueryTerms
    results: list[SearchResult] = Field(default_factory=list)

    @property
    def top(self) -> SearchResult | None:
        return self.results[0] if self.results else None


class GateDecision(BaseModel):
    """Relevance gate verdict."""

    accepted: bool
    reason: str
