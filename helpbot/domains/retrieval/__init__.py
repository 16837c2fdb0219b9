"""
Retrieval Domain - Keyword search over the knowledge base.

This domain handles:
- Query term extraction (stopwords, technical terms)
- Document scoring and snippet placement
- Ranked knowledge search
- The relevance gate deciding whether to answer at all
"""

from .contracts import DocumentSource
from .gate import EmptyTermsPolicy, RelevanceGate
from .knowledge_search import KnowledgeSearch, highlight_snippet
from .models import Document, GateDecision, QueryTerms, SearchOutcome, SearchResult
from .scorer import DocumentScorer, find_word, make_snippet
from .terms import DEFAULT_STOPWORDS, TermExtractor, extract_terms

__all__ = [
    # Contracts
    "DocumentSource",
    # Models
    "Document",
    "QueryTerms",
    "SearchResult",
    "SearchOutcome",
    "GateDecision",
    # Implementations
    "TermExtractor",
    "DEFAULT_STOPWORDS",
    "extract_terms",
    "DocumentScorer",
    "find_word",
    "make_snippet",
    "KnowledgeSearch",
    "highlight_snippet",
    "RelevanceGate",
    "EmptyTermsPolicy",
]
