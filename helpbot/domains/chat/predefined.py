"""
Predefined Content - Canned replies that skip retrieval entirely.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

__all__ = ["PREDEFINED_RESPONSES", "match_predefined", "normalize_query"]

_GREETING = "Hello! I'm HelpBot. Ask me anything covered by the knowledge base and I'll answer from it."
_THANKS = "You're welcome! Let me know if there is anything else I can look up."
_HELP = (
    "I answer questions using the pages stored in the knowledge base. "
    "Add pages by crawling their URLs, then ask about their content."
)

PREDEFINED_RESPONSES: dict[str, str] = {
    "hello": _GREETING,
    "hi": _GREETING,
    "hey": _GREETING,
    "good morning": _GREETING,
    "good afternoon": _GREETING,
    "good evening": _GREETING,
    "thanks": _THANKS,
    "thank you": _THANKS,
    "help": _HELP,
    "what can you do": _HELP,
}

_PUNCTUATION = re.compile(r"[^\w\s]")


def normalize_query(query: str) -> str:
    """Lowercase, drop punctuation, collapse whitespace."""
    return " ".join(_PUNCTUATION.sub("", query.lower()).split())


def match_predefined(query: str, table: Mapping[str, str] | None = None) -> str | None:
    """Return the canned reply for a query, or None."""
    responses = PREDEFINED_RESPONSES if table is None else table
    return responses.get(normalize_query(query))
