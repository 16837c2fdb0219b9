"""
Model Routes - Language models available to the assistant.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from helpbot.adapters.ollama import OllamaClient
from helpbot.config import get_settings
from helpbot.config.errors import LLMError
from helpbot.interfaces.api.deps import get_ollama_client

logger = logging.getLogger(__name__)

router = APIRouter()

FALLBACK_MODELS = ["gemma3:1b", "gemma:7b", "llama3:8b", "llama3:70b", "mistral:7b"]


class ModelsResponse(BaseModel):
    """Installed models, or a fallback list when Ollama is unreachable."""

    models: list[str]
    default: str
    error: str | None = None


@router.get("", response_model=ModelsResponse)
async def list_models(client: OllamaClient = Depends(get_ollama_client)) -> ModelsResponse:
    """List models installed in Ollama."""
    default = get_settings().ollama_model
    try:
        models = await client.list_models()
    except LLMError as e:
        logger.warning("Falling back to default model list: %s", e.message)
        return ModelsResponse(models=FALLBACK_MODELS, default=default, error=e.message)
    return ModelsResponse(models=models, default=default)
