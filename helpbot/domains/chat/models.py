"""
Chat Models - Requests, responses, and stream envelopes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, Field

from helpbot.domains.attribution import Reference


class AnswerSource(str, Enum):
    """Where an answer came from."""

    KNOWLEDGE_BASE = "knowledge_base"
    NO_INFORMATION = "no_information"
    PREDEFINED = "predefined"
    ERROR = "error"


class Message(BaseModel):
    """Role-tagged chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    model_config = {"frozen": True}


class GenerationConfig(BaseModel):
    """
    Per-request generation parameters.

    Unset fields are filled from the server defaults by `merged_over`.
    Accepts camelCase keys (topP, maxTokens, systemPrompt) from clients.
    """

    model: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0, alias="topP")
    max_tokens: int | None = Field(default=None, ge=1, alias="maxTokens")
    system_prompt: str | None = Field(default=None, alias="systemPrompt")

    model_config = {"frozen": True, "populate_by_name": True, "protected_namespaces": ()}

    def merged_over(self, base: GenerationConfig) -> GenerationConfig:
        """Return a config where fields unset here come from base."""
        values = {
            name: getattr(self, name) if getattr(self, name) is not None else getattr(base, name)
            for name in type(self).model_fields
        }
        return GenerationConfig(**values)


class ChatRequest(BaseModel):
    """Question with prior conversation."""

    message: str = Field(..., min_length=1)
    history: list[Message] = Field(default_factory=list)
    config: GenerationConfig | None = None


class ChatResponse(BaseModel):
    """Single-shot answer."""

    response: str
    source: AnswerSource
    references: list[Reference] = Field(default_factory=list)
    debug: dict[str, Any] = Field(default_factory=dict)


class AssembledPrompt(BaseModel):
    """Messages ready for the language model."""

    messages: list[Message]
    context: str
    estimated_tokens: int = 0

    def as_dicts(self) -> list[dict[str, str]]:
        return [m.model_dump() for m in self.messages]


class MetadataEnvelope(BaseModel):
    """Source and references, refined as the answer streams."""

    type: Literal["metadata"] = "metadata"
    source: AnswerSource
    references: list[Reference] = Field(default_factory=list)
    debug: dict[str, Any] = Field(default_factory=dict)


class ContentEnvelope(BaseModel):
    """One fragment of answer text."""

    type: Literal["content"] = "content"
    content: str


class DoneEnvelope(BaseModel):
    """Terminal marker, exactly one per stream."""

    type: Literal["done"] = "done"


Envelope = Union[MetadataEnvelope, ContentEnvelope, DoneEnvelope]
