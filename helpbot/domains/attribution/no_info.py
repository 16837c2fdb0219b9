"""
No-information detection - Recognizes answers that decline to answer.
"""

from __future__ import annotations

__all__ = ["NO_INFORMATION_MESSAGE", "NO_INFO_PHRASES", "contains_no_info_phrase"]

NO_INFORMATION_MESSAGE = "I don't have that information in my knowledge base."

NO_INFO_PHRASES: tuple[str, ...] = (
    "don't have that information",
    "do not have that information",
    "don't have information",
    "do not have information",
    "not in my knowledge base",
    "no information about",
    "couldn't find any information",
    "could not find any information",
)


def contains_no_info_phrase(text: str, phrases: tuple[str, ...] = NO_INFO_PHRASES) -> bool:
    """Case-insensitive substring check against the fixed phrase set."""
    lowered = text.lower().replace("’", "'")
    return any(phrase in lowered for phrase in phrases)
