"""
Attribution Domain - Which retrieved documents did an answer use.

This domain handles:
- Detection of "no information" answers
- Three-tier reference filtering (title, content phrases, fallback)
"""

from .models import Reference
from .no_info import NO_INFO_PHRASES, NO_INFORMATION_MESSAGE, contains_no_info_phrase
from .reference_filter import (
    FILTER_STOPWORDS,
    ReferenceFilter,
    TitleMatchMode,
    content_phrases,
    significant_terms,
)

__all__ = [
    "Reference",
    "NO_INFO_PHRASES",
    "NO_INFORMATION_MESSAGE",
    "contains_no_info_phrase",
    "FILTER_STOPWORDS",
    "ReferenceFilter",
    "TitleMatchMode",
    "content_phrases",
    "significant_terms",
]
