"""
API Dependencies - Dependency injection for FastAPI routes.

Provides singleton instances of the store, model client, and services.
"""

from __future__ import annotations

from functools import lru_cache

from helpbot.adapters.crawler import KnowledgeBaseService, PageCrawler
from helpbot.adapters.filestore import FileDocumentStore
from helpbot.adapters.ollama import OllamaClient
from helpbot.config import get_settings
from helpbot.domains.attribution import ReferenceFilter
from helpbot.domains.chat import ChatOrchestrator, GenerationConfig, PromptAssembler
from helpbot.domains.retrieval import KnowledgeSearch, RelevanceGate


@lru_cache
def get_document_store() -> FileDocumentStore:
    """Get document store singleton."""
    return FileDocumentStore(get_settings().knowledge_base_dir)


@lru_cache
def get_ollama_client() -> OllamaClient:
    """Get Ollama client singleton."""
    settings = get_settings()
    return OllamaClient(base_url=settings.ollama_url, timeout=settings.ollama_timeout)


@lru_cache
def get_page_crawler() -> PageCrawler:
    """Get page crawler singleton."""
    return PageCrawler(timeout=get_settings().crawl_timeout)


@lru_cache
def get_knowledge_search() -> KnowledgeSearch:
    """Get knowledge search singleton."""
    return KnowledgeSearch(get_document_store())


@lru_cache
def get_knowledge_service() -> KnowledgeBaseService:
    """Get crawl-and-store service singleton."""
    return KnowledgeBaseService(get_page_crawler(), get_document_store())


@lru_cache
def get_orchestrator() -> ChatOrchestrator:
    """Get chat orchestrator singleton wired from settings."""
    settings = get_settings()
    return ChatOrchestrator(
        search=get_knowledge_search(),
        backend=get_ollama_client(),
        gate=RelevanceGate(
            empty_terms_policy=settings.gate_empty_terms_policy,
            relevance_threshold=settings.gate_relevance_threshold,
            coverage_ratio=settings.gate_coverage_ratio,
        ),
        reference_filter=ReferenceFilter(title_mode=settings.reference_title_mode),
        assembler=PromptAssembler(get_document_store(), max_results=settings.max_context_results),
        default_config=GenerationConfig(
            model=settings.ollama_model,
            temperature=settings.default_temperature,
            top_p=settings.default_top_p,
            max_tokens=settings.default_max_tokens,
        ),
    )


async def cleanup_services() -> None:
    """Close HTTP clients on shutdown."""
    await get_ollama_client().close()
    await get_page_crawler().close()
