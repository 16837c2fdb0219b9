"""
Document Scorer - Keyword relevance for a single document.

Relevance combines the fraction of query terms found in the body with additive
bonuses for title hits, an exact phrase hit, and technical term hits, capped
at 1.0. Helpdesk queries are short, so the bonuses let strong signals dominate
plain term frequency.
"""

from __future__ import annotations

import re
from functools import lru_cache

from .models import Document, QueryTerms, SearchResult

__all__ = ["DocumentScorer", "find_word", "make_snippet"]

TITLE_WEIGHT = 0.5
PHRASE_BONUS = 0.5
TECHNICAL_WEIGHT = 0.8
SNIPPET_RADIUS = 200


@lru_cache(maxsize=256)
def _word_pattern(term: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){re.escape(term)}(?!\w)")


def find_word(text: str, term: str) -> int:
    """Index of term as a whole word in text, or -1."""
    match = _word_pattern(term).search(text)
    return match.start() if match else -1


def make_snippet(text: str, index: int, length: int, radius: int = SNIPPET_RADIUS) -> str:
    """
    Cut a window of text around a match.

    Args:
        text: Full text
        index: Match start position
        length: Match length
        radius: Characters kept on each side of the match

    Returns:
        Window with "..." marking each clipped side
    """
    start = max(0, index - radius)
    end = min(len(text), index + length + radius)
    snippet = text[start:end]
    if start > 0:
        snippet = "..." + snippet
    if end < len(text):
        snippet = snippet + "..."
    return snippet


class DocumentScorer:
    """
    Scores one document against extracted query terms.

    Example:
        >>> scorer = DocumentScorer()
        >>> result = scorer.score(document, extract_terms("reset password"))
        >>> result.relevance
        1.0
    """

    def __init__(
        self,
        title_weight: float = TITLE_WEIGHT,
        phrase_bonus: float = PHRASE_BONUS,
        technical_weight: float = TECHNICAL_WEIGHT,
        snippet_radius: int = SNIPPET_RADIUS,
    ) -> None:
        self.title_weight = title_weight
        self.phrase_bonus = phrase_bonus
        self.technical_weight = technical_weight
        self.snippet_radius = snippet_radius

    def score(self, document: Document, terms: QueryTerms) -> SearchResult | None:
        """
        Score a document.

        Args:
            document: Document with plain-text body
            terms: Extracted query terms

        Returns:
            SearchResult, or None when no term occurs in the body
        """
        if terms.is_empty or not document.body:
            return None

        body = document.body
        lower_body = body.lower()
        lower_title = document.title.lower()

        exact_phrase = terms.phrase is not None and terms.phrase in lower_body

        technical = set(terms.technical_terms)
        # Product names and codes match as whole words only
        technical_matches = sum(1 for t in technical if find_word(lower_body, t) != -1)
        title_matches = sum(1 for t in terms.terms if t in lower_title)

        matched: list[str] = []
        best_index = -1
        best_term = ""
        for term in terms.terms:
            index = find_word(lower_body, term) if term in technical else lower_body.find(term)
            if index == -1:
                continue
            matched.append(term)
            if best_index == -1 or index < best_index:
                best_index = index
                best_term = term

        if not matched:
            return None

        term_count = len(terms.terms)
        relevance = len(matched) / term_count
        if title_matches:
            relevance += (title_matches / term_count) * self.title_weight
        if exact_phrase:
            relevance += self.phrase_bonus
        if technical_matches:
            relevance += (technical_matches / len(terms.technical_terms)) * self.technical_weight
        relevance = min(1.0, relevance)

        return SearchResult(
            identifier=document.identifier,
            title=document.title,
            url=document.url,
            snippet=make_snippet(body, best_index, len(best_term), self.snippet_radius),
            relevance=relevance,
            matched_terms=matched,
            title_match_count=title_matches,
            technical_match_count=technical_matches,
            exact_phrase=exact_phrase,
        )
