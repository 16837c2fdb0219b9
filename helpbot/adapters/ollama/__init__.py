"""Ollama adapter - Local language model client."""

from .client import OllamaClient

__all__ = ["OllamaClient"]
