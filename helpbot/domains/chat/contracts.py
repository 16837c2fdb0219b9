"""
Chat Contracts - Interfaces for chat domain.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from .models import ChatRequest, ChatResponse, Envelope


@runtime_checkable
class ChatBackend(Protocol):
    """Contract for the language model behind the assistant."""

    async def chat(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        top_p: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Return the complete assistant reply."""
        ...

    def stream_chat(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        top_p: float | None = None,
        max_tokens: int | None = None,
    ) -> AsyncIterator[str]:
        """Yield reply fragments until the model signals completion."""
        ...


@runtime_checkable
class Assistant(Protocol):
    """Contract for answer generation."""

    async def answer(self, request: ChatRequest) -> ChatResponse:
        """Produce one complete answer."""
        ...

    def stream(self, request: ChatRequest) -> AsyncIterator[Envelope]:
        """Produce metadata/content envelopes ending with a done envelope."""
        ...
