"""
HelpBot - Knowledge-base helpdesk assistant over a local language model.

Example:
    >>> from helpbot.domains.retrieval import KnowledgeSearch
    >>> from helpbot.adapters import FileDocumentStore
    >>> search = KnowledgeSearch(FileDocumentStore("knowledge-base"))
    >>> outcome = await search.search("reset VPN password")
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
