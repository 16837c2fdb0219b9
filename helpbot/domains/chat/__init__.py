"""
Chat Domain - Knowledge-grounded answer generation.

This domain handles:
- Predefined replies for greetings and help requests
- Prompt assembly with knowledge base context
- Single-shot and streaming answer orchestration
"""

from .contracts import Assistant, ChatBackend
from .models import (
    AnswerSource,
    AssembledPrompt,
    ChatRequest,
    ChatResponse,
    ContentEnvelope,
    DoneEnvelope,
    Envelope,
    GenerationConfig,
    Message,
    MetadataEnvelope,
)
from .orchestrator import APOLOGY_MESSAGE, ChatOrchestrator
from .predefined import PREDEFINED_RESPONSES, match_predefined, normalize_query
from .prompts import DEFAULT_SYSTEM_PROMPT, PromptAssembler, expand_snippet

__all__ = [
    # Contracts
    "ChatBackend",
    "Assistant",
    # Models
    "AnswerSource",
    "Message",
    "GenerationConfig",
    "ChatRequest",
    "ChatResponse",
    "AssembledPrompt",
    "MetadataEnvelope",
    "ContentEnvelope",
    "DoneEnvelope",
    "Envelope",
    # Implementations
    "ChatOrchestrator",
    "APOLOGY_MESSAGE",
    "PromptAssembler",
    "DEFAULT_SYSTEM_PROMPT",
    "expand_snippet",
    "PREDEFINED_RESPONSES",
    "match_predefined",
    "normalize_query",
]
