"""
Reference Filter - Post-hoc attribution of an answer to retrieved documents.

The model may paraphrase, so exact matching alone under-attributes. Three
progressively looser tiers are tried and the first non-empty one wins:

1. Title match: the title, or enough of its meaningful words, appear in the answer
2. Content match: phrases and sentences of the snippet appear verbatim
3. Fallback: a substantial answer shares significant terms with the top result

An answer containing a "no information" phrase is never attributed.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Sequence
from enum import Enum
from functools import lru_cache

from helpbot.domains.retrieval import DEFAULT_STOPWORDS, SearchResult

from .models import Reference
from .no_info import contains_no_info_phrase

logger = logging.getLogger(__name__)

__all__ = [
    "FILTER_STOPWORDS",
    "ReferenceFilter",
    "TitleMatchMode",
    "content_phrases",
    "significant_terms",
]

FILTER_STOPWORDS: frozenset[str] = DEFAULT_STOPWORDS | frozenset(
    {
        "this", "that", "these", "those", "your", "you", "what", "when", "where",
        "which", "will", "then", "than", "there", "their", "they", "them", "here",
        "also", "into", "more", "most", "some", "such", "only", "other", "over",
        "very", "just", "like", "page", "home", "not", "all", "any", "its", "our",
    }
)

_NON_WORD = re.compile(r"[^\w\s]")
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+|\n+")


class TitleMatchMode(str, Enum):
    """How many title words must appear in the answer."""

    LENIENT = "lenient"  # at least one word covering 30% of the title
    STRICT = "strict"  # at least two words covering 50% of the title


def _normalize(text: str) -> str:
    return " ".join(_NON_WORD.sub(" ", text.lower()).split())


def _strip_ellipses(snippet: str) -> tuple[str, bool, bool]:
    text = snippet.strip()
    head = text.startswith("...")
    tail = text.endswith("...")
    if head:
        text = text[3:]
    if tail:
        text = text[:-3]
    return text, head, tail


def _trim_clipped_edges(snippet: str) -> str:
    # Words at a clipped edge are usually cut in half
    text, head, tail = _strip_ellipses(snippet)
    if head:
        parts = text.split(None, 1)
        text = parts[1] if len(parts) > 1 else ""
    if tail:
        parts = text.rsplit(None, 1)
        text = parts[0] if len(parts) > 1 else ""
    return text


@lru_cache(maxsize=1024)
def content_phrases(
    snippet: str,
    stopwords: frozenset[str] = FILTER_STOPWORDS,
) -> tuple[str, ...]:
    """
    Extract matchable phrases from a snippet.

    Args:
        snippet: Search result snippet, possibly ellipsis-marked
        stopwords: Words a phrase may not start or end with

    Returns:
        Normalized 3-5 word windows longer than 10 characters, followed by
        sentences of 20-100 characters
    """
    text = _trim_clipped_edges(snippet)
    words = _normalize(text).split()

    phrases: list[str] = []
    seen: set[str] = set()

    for size in (3, 4, 5):
        for i in range(len(words) - size + 1):
            window = words[i : i + size]
            if window[0] in stopwords or window[-1] in stopwords:
                continue
            phrase = " ".join(window)
            if len(phrase) > 10 and phrase not in seen:
                seen.add(phrase)
                phrases.append(phrase)

    for sentence in _SENTENCE_SPLIT.split(text):
        normalized = _normalize(sentence)
        if 20 <= len(normalized) <= 100 and normalized not in seen:
            seen.add(normalized)
            phrases.append(normalized)

    return tuple(phrases)


def significant_terms(
    result: SearchResult,
    limit: int = 10,
    stopwords: frozenset[str] = FILTER_STOPWORDS,
) -> list[str]:
    """Most frequent non-stopword words longer than four characters in title and snippet."""
    text, _, _ = _strip_ellipses(result.snippet)
    words = _normalize(f"{result.title} {text}").split()
    counts = Counter(w for w in words if len(w) > 4 and w not in stopwords and not w.isdigit())
    return [word for word, _ in counts.most_common(limit)]


class ReferenceFilter:
    """
    Decides which candidate documents an answer draws from.

    Example:
        >>> refs = ReferenceFilter().filter(outcome.results, "Reset your password ...")
        >>> refs[0].title
        'Password Reset Policy'
    """

    def __init__(
        self,
        title_mode: TitleMatchMode | str = TitleMatchMode.LENIENT,
        stopwords: frozenset[str] = FILTER_STOPWORDS,
        fallback_min_length: int = 100,
    ) -> None:
        """
        Initialize filter.

        Args:
            title_mode: Lenient or strict title-word matching
            stopwords: Words ignored in titles and phrase edges
            fallback_min_length: Answer length required before the fallback tier
        """
        self.title_mode = TitleMatchMode(title_mode)
        self.stopwords = stopwords
        self.fallback_min_length = fallback_min_length

    def filter(self, candidates: Sequence[SearchResult], answer: str) -> list[Reference]:
        """
        Select the references an answer appears to use.

        Args:
            candidates: All ranked search results for the query
            answer: Generated answer text (complete or accumulated so far)

        Returns:
            References in candidate rank order, unique by URL
        """
        if not candidates or not answer.strip():
            return []
        if contains_no_info_phrase(answer):
            return []

        answer_lower = answer.lower()
        answer_normalized = f" {_normalize(answer)} "

        selected = [c for c in candidates if self._title_matches(c.title, answer_lower)]
        tier = "title"

        if not selected:
            required = self._required_phrase_matches(answer)
            selected = [
                c for c in candidates if self._content_matches(c.snippet, answer_normalized, required)
            ]
            tier = "content"

        if not selected and len(answer) > self.fallback_min_length:
            top = candidates[0]
            terms = significant_terms(top, stopwords=self.stopwords)
            needed = min(2, len(terms))
            if needed and sum(1 for t in terms if f" {t} " in answer_normalized) >= needed:
                selected = [top]
            tier = "fallback"

        references = _unique_references(selected)
        if references:
            logger.debug("Reference filter kept %d of %d via %s", len(references), len(candidates), tier)
        return references

    def _title_matches(self, title: str, answer_lower: str) -> bool:
        title_lower = title.lower().strip()
        if not title_lower:
            return False
        if re.search(rf"(?<!\w){re.escape(title_lower)}(?!\w)", answer_lower):
            return True

        meaningful = (
            w for w in _normalize(title_lower).split() if len(w) > 3 and w not in self.stopwords
        )
        words = list(dict.fromkeys(meaningful))
        if not words:
            return False

        matched = sum(1 for w in words if re.search(rf"\b{re.escape(w)}\b", answer_lower))
        coverage = matched / len(words)
        if self.title_mode is TitleMatchMode.STRICT:
            return matched >= 2 and coverage >= 0.5
        return matched >= 1 and coverage >= 0.3

    def _required_phrase_matches(self, answer: str) -> int:
        if len(answer) < 200:
            return 1
        if len(answer) < 500:
            return 2
        return 3

    def _content_matches(self, snippet: str, answer_normalized: str, required: int) -> bool:
        phrases = content_phrases(snippet, self.stopwords)
        if not phrases:
            return False
        needed = min(required, len(phrases))
        found = 0
        for phrase in phrases:
            if f" {phrase} " in answer_normalized:
                found += 1
                if found >= needed:
                    return True
        return False


def _unique_references(results: Sequence[SearchResult]) -> list[Reference]:
    seen: set[str] = set()
    references = []
    for result in results:
        if result.url in seen:
            continue
        seen.add(result.url)
        references.append(Reference(title=result.title, url=result.url))
    return references
