"""Crawler adapter - Web pages into the knowledge base."""

from .crawler import KnowledgeBaseService, PageCrawler, extract_page, fallback_page, validate_url
from .models import CrawledPage, IngestResult

__all__ = [
    "PageCrawler",
    "KnowledgeBaseService",
    "CrawledPage",
    "IngestResult",
    "extract_page",
    "fallback_page",
    "validate_url",
]
