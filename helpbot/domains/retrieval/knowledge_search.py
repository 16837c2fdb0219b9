"""
Knowledge Search - Keyword search over every stored document.

Features:
- Term extraction with stopword filtering
- Per-document scoring with title/phrase/technical bonuses
- Stable ranking (ties keep store order)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from helpbot.config.errors import StorageError

from .contracts import DocumentSource
from .models import SearchOutcome, SearchResult
from .scorer import DocumentScorer
from .terms import TermExtractor

logger = logging.getLogger(__name__)

__all__ = ["KnowledgeSearch", "highlight_snippet"]


class KnowledgeSearch:
    """
    Keyword search engine over a document store.

    Example:
        >>> search = KnowledgeSearch(FileDocumentStore("knowledge-base"))
        >>> outcome = await search.search("how do I reset my password")
        >>> outcome.results[0].title
        'Password Reset Policy'
    """

    def __init__(
        self,
        store: DocumentSource,
        extractor: TermExtractor | None = None,
        scorer: DocumentScorer | None = None,
    ) -> None:
        """
        Initialize knowledge search.

        Args:
            store: Document store to scan
            extractor: Term extractor (default stopword list if None)
            scorer: Document scorer (default weights if None)
        """
        self.store = store
        self.extractor = extractor or TermExtractor()
        self.scorer = scorer or DocumentScorer()

    async def search(self, query: str) -> SearchOutcome:
        """
        Search the store.

        Args:
            query: Raw user query

        Returns:
            Extracted terms and results sorted by descending relevance
        """
        terms = self.extractor.extract(query)
        if terms.is_empty:
            logger.debug("No significant terms in query '%s'", query[:50])
            return SearchOutcome(query=query, terms=terms)

        try:
            documents = await self.store.all_documents()
        except (StorageError, OSError) as e:
            logger.warning("Knowledge base unavailable, searching nothing: %s", e)
            documents = []

        results: list[SearchResult] = []
        for document in documents:
            result = self.scorer.score(document, terms)
            if result is not None:
                results.append(result)

        # sort() is stable
        results.sort(key=lambda r: r.relevance, reverse=True)

        logger.info(
            "Knowledge search: query='%s' terms=%s -> %d results (top=%.2f)",
            query[:50],
            list(terms.terms),
            len(results),
            results[0].relevance if results else 0.0,
        )

        return SearchOutcome(query=query, terms=terms, results=results)


def highlight_snippet(snippet: str, terms: Iterable[str]) -> str:
    """Wrap every case-insensitive occurrence of the terms in <strong> tags."""
    words = sorted({t for t in terms if t}, key=len, reverse=True)
    if not words:
        return snippet
    pattern = re.compile("|".join(re.escape(w) for w in words), re.IGNORECASE)
    return pattern.sub(lambda m: f"<strong>{m.group()}</strong>", snippet)
