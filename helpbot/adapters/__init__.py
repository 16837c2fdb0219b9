"""
Adapters - External service integrations.

All file, network, and model calls are wrapped here to isolate domains from third-party changes.
"""

from .filestore import FileDocumentStore, KnowledgeEntry
from .ollama import OllamaClient
from .crawler import CrawledPage, IngestResult, KnowledgeBaseService, PageCrawler

__all__ = [
    "FileDocumentStore",
    "KnowledgeEntry",
    "OllamaClient",
    "PageCrawler",
    "KnowledgeBaseService",
    "CrawledPage",
    "IngestResult",
]
