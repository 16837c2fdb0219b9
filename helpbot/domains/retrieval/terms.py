"""
Term Extractor - Turns a raw query into significant search terms.

Plain terms are lowercased, punctuation-free tokens longer than two characters
that are not stopwords. Technical terms (hyphenated tokens such as "wi-fi" and
capitalized tokens such as "VPN" or "Windows-10") are detected on the raw query
and unioned in, since they usually name products or error codes.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import QueryTerms

__all__ = ["DEFAULT_STOPWORDS", "TermExtractor", "extract_terms"]

DEFAULT_STOPWORDS: frozenset[str] = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "in", "on", "at", "to",
        "for", "with", "about", "is", "are", "was", "were", "be", "been", "being",
        "have", "has", "had", "do", "does", "did", "can", "could", "will", "would",
        "should", "may", "might", "must", "tell", "me", "of", "from", "by", "as",
    }
)

_PUNCTUATION = re.compile(r"[^\w\s]")
_TECHNICAL = re.compile(
    r"\b[A-Za-z0-9]+(?:-[A-Za-z0-9]+)+\b"  # hyphenated: wi-fi, x-200, Windows-10
    r"|\b[A-Z][A-Za-z0-9]*\b"  # capitalized: VPN, Outlook
)
_SENTENCE_START = re.compile(r"(?:^|[.!?])\s*$")


def _unique(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


class TermExtractor:
    """
    Query term extraction with a configurable stopword list.

    Example:
        >>> TermExtractor().extract("How do I connect to the VPN?").terms
        ('how', 'connect', 'vpn')
    """

    def __init__(self, stopwords: Iterable[str] | None = None, min_length: int = 3) -> None:
        """
        Initialize extractor.

        Args:
            stopwords: Words never treated as terms (defaults to DEFAULT_STOPWORDS)
            min_length: Minimum plain term length
        """
        self.stopwords = frozenset(w.lower() for w in stopwords) if stopwords is not None else DEFAULT_STOPWORDS
        self.min_length = min_length

    def plain_terms(self, query: str) -> list[str]:
        """Lowercased, punctuation-stripped, stopword-filtered words in query order."""
        words = _PUNCTUATION.sub("", query.lower()).split()
        return _unique(w for w in words if len(w) >= self.min_length and w not in self.stopwords)

    def technical_terms(self, query: str) -> list[str]:
        """Hyphenated or capitalized tokens of at least min_length characters, lowercased."""
        found = []
        for match in _TECHNICAL.finditer(query):
            token = match.group()
            lowered = token.lower()
            if len(token) < self.min_length or lowered in self.stopwords:
                continue
            if "-" not in token and not _is_acronym(token) and not any(c.isdigit() for c in token):
                # Ordinary capitalized word at the start of a sentence
                if _SENTENCE_START.search(query[: match.start()]):
                    continue
            found.append(lowered)
        return _unique(found)

    def extract(self, query: str) -> QueryTerms:
        """Extract plain and technical terms from a raw query."""
        if not query or not query.strip():
            return QueryTerms()

        plain = self.plain_terms(query)
        technical = self.technical_terms(query)

        return QueryTerms(
            terms=tuple(_unique([*plain, *technical])),
            technical_terms=tuple(technical),
            phrase=" ".join(plain) if len(plain) >= 2 else None,
        )


def _is_acronym(token: str) -> bool:
    return sum(1 for c in token if c.isupper()) >= 2


_default_extractor = TermExtractor()


def extract_terms(query: str) -> QueryTerms:
    """Extract terms with the default stopword list."""
    return _default_extractor.extract(query)
