"""
Ollama Client - Local LLM behind the helpdesk assistant.

Features:
- Async HTTP client
- Chat completion over /api/chat
- NDJSON streaming with tolerant line parsing
- Model listing
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from helpbot.config.errors import ErrorCode, LLMError

logger = logging.getLogger(__name__)

__all__ = ["OllamaClient"]


class OllamaClient:
    """
    Ollama local LLM client.

    Example:
        >>> client = OllamaClient()
        >>> reply = await client.chat("gemma3:1b", [{"role": "user", "content": "Hi"}])
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        timeout: float | None = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize Ollama client.

        Args:
            base_url: Ollama server URL
            timeout: Request timeout in seconds (None waits indefinitely)
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    @staticmethod
    def _payload(
        model: str,
        messages: list[dict[str, str]],
        stream: bool,
        temperature: float | None,
        top_p: float | None,
        max_tokens: int | None,
    ) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if temperature is not None:
            options["temperature"] = temperature
        if top_p is not None:
            options["top_p"] = top_p
        if max_tokens is not None:
            options["num_predict"] = max_tokens

        payload: dict[str, Any] = {"model": model, "messages": messages, "stream": stream}
        if options:
            payload["options"] = options
        return payload

    async def chat(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        top_p: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Chat completion.

        Args:
            model: Model name (e.g., "gemma3:1b")
            messages: List of {"role": "system/user/assistant", "content": "..."}
            temperature: Sampling temperature
            top_p: Nucleus sampling cutoff
            max_tokens: Maximum tokens to generate

        Returns:
            Assistant response

        Raises:
            LLMError: If Ollama is unreachable or answers with an error
        """
        client = await self._get_client()
        payload = self._payload(model, messages, False, temperature, top_p, max_tokens)

        try:
            response = await client.post("/api/chat", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"Ollama returned {e.response.status_code}",
                details={"model": model, "url": self.base_url},
            ) from e
        except httpx.HTTPError as e:
            raise LLMError(
                f"Ollama unavailable: {e}",
                details={"model": model, "url": self.base_url},
            ) from e
        except ValueError as e:
            raise LLMError(
                "Ollama returned invalid JSON",
                details={"model": model},
                code=ErrorCode.LLM_INVALID_RESPONSE,
            ) from e

        if not isinstance(data, dict):
            raise LLMError(
                "Ollama returned an unexpected response",
                details={"model": model},
                code=ErrorCode.LLM_INVALID_RESPONSE,
            )
        if "error" in data:
            raise LLMError(str(data["error"]), details={"model": model})

        message = data.get("message")
        if not isinstance(message, dict):
            raise LLMError(
                "Ollama response has no message",
                details={"model": model},
                code=ErrorCode.LLM_INVALID_RESPONSE,
            )
        return message.get("content") or ""

    async def stream_chat(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        top_p: float | None = None,
        max_tokens: int | None = None,
    ) -> AsyncIterator[str]:
        """
        Stream a chat completion.

        Malformed lines are skipped. The stream ends at the first line
        with "done": true or when the connection closes.

        Args:
            model: Model name
            messages: Conversation messages
            temperature: Sampling temperature
            top_p: Nucleus sampling cutoff
            max_tokens: Maximum tokens to generate

        Yields:
            Text fragments

        Raises:
            LLMError: If Ollama is unreachable or reports an error mid-stream
        """
        client = await self._get_client()
        payload = self._payload(model, messages, True, temperature, top_p, max_tokens)

        try:
            async with client.stream("POST", "/api/chat", json=payload) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError:
                        logger.warning("Skipping malformed Ollama stream line: %s", line[:100])
                        continue
                    if not isinstance(data, dict):
                        logger.warning("Skipping non-object Ollama stream line: %s", line[:100])
                        continue

                    if "error" in data:
                        raise LLMError(str(data["error"]), details={"model": model})

                    message = data.get("message")
                    if message is not None and not isinstance(message, dict):
                        logger.warning("Skipping Ollama stream line with bad message: %s", line[:100])
                    elif message:
                        content = message.get("content")
                        if isinstance(content, str) and content:
                            yield content
                    if data.get("done"):
                        return
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"Ollama returned {e.response.status_code}",
                details={"model": model, "url": self.base_url},
            ) from e
        except httpx.HTTPError as e:
            raise LLMError(
                f"Ollama unavailable: {e}",
                details={"model": model, "url": self.base_url},
            ) from e

    async def list_models(self) -> list[str]:
        """
        List locally installed models.

        Raises:
            LLMError: If Ollama is unreachable
        """
        client = await self._get_client()
        try:
            response = await client.get("/api/tags")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LLMError(f"Could not list Ollama models: {e}", details={"url": self.base_url}) from e

        return [m["name"] for m in data.get("models", []) if "name" in m]

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
