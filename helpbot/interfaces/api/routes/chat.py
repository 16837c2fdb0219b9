"""
Chat Routes - Knowledge-base answers, single-shot and streamed.

The stream is newline-delimited JSON: metadata and content envelopes
followed by exactly one {"type": "done"}.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import aclosing

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from helpbot.domains.chat import Assistant, ChatRequest, ChatResponse
from helpbot.interfaces.api.deps import get_orchestrator

router = APIRouter()

NDJSON_MEDIA_TYPE = "application/x-ndjson"


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    orchestrator: Assistant = Depends(get_orchestrator),
) -> ChatResponse:
    """
    Answer a question from the knowledge base.

    - **message**: User question
    - **history**: Prior turns ({role, content})
    - **config**: Optional model, temperature, topP, maxTokens, systemPrompt
    """
    return await orchestrator.answer(request)


@router.post("/stream")
async def chat_stream(
    request: ChatRequest,
    orchestrator: Assistant = Depends(get_orchestrator),
) -> StreamingResponse:
    """Stream an answer as NDJSON envelopes."""

    async def lines() -> AsyncIterator[str]:
        async with aclosing(orchestrator.stream(request)) as envelopes:
            async for envelope in envelopes:
                yield envelope.model_dump_json() + "\n"

    return StreamingResponse(
        lines(),
        media_type=NDJSON_MEDIA_TYPE,
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
