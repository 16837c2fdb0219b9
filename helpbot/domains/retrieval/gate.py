"""
Relevance Gate - Decides whether search results justify an answer.

A single top-1 relevance threshold is too noisy for short helpdesk queries,
so acceptance is an ordered OR of several signals. The first signal that
holds wins and names the decision's reason.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from enum import Enum

from .models import GateDecision, QueryTerms, SearchResult
from .scorer import find_word

logger = logging.getLogger(__name__)

__all__ = ["EmptyTermsPolicy", "RelevanceGate"]


class EmptyTermsPolicy(str, Enum):
    """Handling of queries that produced no significant terms."""

    STRICT = "strict"  # accept only a very strong top result
    PERMISSIVE = "permissive"  # accept whenever anything matched


class RelevanceGate:
    """
    Multi-signal accept/reject decision.

    Example:
        >>> gate = RelevanceGate()
        >>> gate.evaluate(outcome.results, outcome.terms).accepted
        True
    """

    def __init__(
        self,
        empty_terms_policy: EmptyTermsPolicy | str = EmptyTermsPolicy.STRICT,
        empty_terms_threshold: float = 0.8,
        relevance_threshold: float = 0.7,
        coverage_ratio: float = 0.6,
        signal_depth: int = 3,
        coverage_depth: int = 2,
    ) -> None:
        """
        Initialize gate.

        Args:
            empty_terms_policy: Behavior when the query has no terms
            empty_terms_threshold: Top relevance required under the strict policy
            relevance_threshold: Top relevance that accepts on its own
            coverage_ratio: Fraction of terms a top result must contain
            signal_depth: Results inspected for phrase/technical signals
            coverage_depth: Results inspected for term coverage
        """
        self.empty_terms_policy = EmptyTermsPolicy(empty_terms_policy)
        self.empty_terms_threshold = empty_terms_threshold
        self.relevance_threshold = relevance_threshold
        self.coverage_ratio = coverage_ratio
        self.signal_depth = signal_depth
        self.coverage_depth = coverage_depth

    def evaluate(self, results: Sequence[SearchResult], terms: QueryTerms) -> GateDecision:
        """
        Evaluate ranked results.

        Args:
            results: Results sorted by descending relevance
            terms: Terms of the original query

        Returns:
            GateDecision with the first satisfied signal as reason
        """
        decision = self._decide(results, terms)
        logger.debug("Relevance gate: accepted=%s reason=%s", decision.accepted, decision.reason)
        return decision

    def _decide(self, results: Sequence[SearchResult], terms: QueryTerms) -> GateDecision:
        if not results:
            return GateDecision(accepted=False, reason="no_results")

        top = results[0]

        if terms.is_empty:
            if self.empty_terms_policy is EmptyTermsPolicy.PERMISSIVE:
                return GateDecision(accepted=True, reason="empty_terms_permissive")
            if top.relevance > self.empty_terms_threshold:
                return GateDecision(accepted=True, reason="empty_terms_high_relevance")
            return GateDecision(accepted=False, reason="empty_terms")

        inspected = [_haystack(r) for r in results[: self.signal_depth]]

        if terms.phrase and any(terms.phrase in text for text in inspected):
            return GateDecision(accepted=True, reason="exact_phrase")

        if any(find_word(text, t) != -1 for t in terms.technical_terms for text in inspected):
            return GateDecision(accepted=True, reason="technical_term")

        required = math.ceil(len(terms.terms) * self.coverage_ratio)
        for result in results[: self.coverage_depth]:
            text = _haystack(result)
            if sum(1 for t in terms.terms if t in text) >= required:
                return GateDecision(accepted=True, reason="term_coverage")

        if top.relevance > self.relevance_threshold:
            return GateDecision(accepted=True, reason="high_relevance")

        return GateDecision(accepted=False, reason="insufficient_signal")


def _haystack(result: SearchResult) -> str:
    return f"{result.title} {result.snippet}".lower()
