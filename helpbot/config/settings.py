"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Knowledge base (one HTML file per crawled page)
    knowledge_base_dir: Path = Path("knowledge-base")

    # Ollama
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "gemma3:1b"
    # None disables the request timeout
    ollama_timeout: float | None = 120.0

    # Generation defaults (overridable per request)
    default_temperature: float = 0.01
    default_top_p: float = 0.9
    default_max_tokens: int = 1000

    # Relevance gate handling of empty term sets
    gate_empty_terms_policy: Literal["strict", "permissive"] = "strict"
    gate_relevance_threshold: float = 0.7
    gate_coverage_ratio: float = 0.6

    # Reference filter title matching
    reference_title_mode: Literal["lenient", "strict"] = "lenient"

    # Prompt assembly
    max_context_results: int = 5

    # Crawler
    crawl_timeout: float = 30.0

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
