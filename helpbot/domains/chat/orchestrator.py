"""
Chat Orchestrator - Drives one answer from query to references.

Flow per request:
    predefined reply?  -> canned content, done
    search + gate      -> reject: fixed no-information content, done
    prompt + model     -> content fragments with refined references, done
    any failure        -> apology content, done

Every path ends with exactly one done envelope.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import aclosing
from typing import Any

from helpbot.domains.attribution import (
    NO_INFORMATION_MESSAGE,
    Reference,
    ReferenceFilter,
    contains_no_info_phrase,
)
from helpbot.domains.retrieval import (
    GateDecision,
    KnowledgeSearch,
    RelevanceGate,
    SearchOutcome,
    SearchResult,
)

from .contracts import ChatBackend
from .models import (
    AnswerSource,
    AssembledPrompt,
    ChatRequest,
    ChatResponse,
    ContentEnvelope,
    DoneEnvelope,
    Envelope,
    GenerationConfig,
    MetadataEnvelope,
)
from .predefined import match_predefined
from .prompts import PromptAssembler

logger = logging.getLogger(__name__)

__all__ = ["APOLOGY_MESSAGE", "ChatOrchestrator"]

APOLOGY_MESSAGE = (
    "I'm sorry, something went wrong while generating an answer. Please try again in a moment."
)

DEFAULT_CONFIG = GenerationConfig(
    model="gemma3:1b",
    temperature=0.01,
    top_p=0.9,
    max_tokens=1000,
)


class ChatOrchestrator:
    """
    Knowledge-base answer generation.

    Example:
        >>> orchestrator = ChatOrchestrator(search, ollama_client)
        >>> async for envelope in orchestrator.stream(ChatRequest(message="reset password")):
        ...     print(envelope.type)
    """

    def __init__(
        self,
        search: KnowledgeSearch,
        backend: ChatBackend,
        gate: RelevanceGate | None = None,
        reference_filter: ReferenceFilter | None = None,
        assembler: PromptAssembler | None = None,
        default_config: GenerationConfig | None = None,
        predefined: Mapping[str, str] | None = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            search: Knowledge search over the document store
            backend: Language model client
            gate: Relevance gate (default thresholds if None)
            reference_filter: Reference filter (lenient titles if None)
            assembler: Prompt assembler (reads bodies from search.store if None)
            default_config: Generation defaults for fields a request leaves unset
            predefined: Canned replies keyed by normalized query
        """
        self._search = search
        self._backend = backend
        self._gate = gate or RelevanceGate()
        self._filter = reference_filter or ReferenceFilter()
        self._assembler = assembler or PromptAssembler(search.store)
        self._default_config = default_config or DEFAULT_CONFIG
        self._predefined = predefined

    # --- Single-shot ---

    async def answer(self, request: ChatRequest) -> ChatResponse:
        """
        Produce one complete answer.

        Args:
            request: Message, history, and optional config

        Returns:
            ChatResponse; backend failures become an apology with source "error"
        """
        canned = match_predefined(request.message, self._predefined)
        if canned is not None:
            return ChatResponse(
                response=canned,
                source=AnswerSource.PREDEFINED,
                debug={"query": request.message, "predefined": True},
            )

        config = self._resolve_config(request)
        debug: dict[str, Any] = {"query": request.message}

        try:
            outcome, decision = await self._retrieve(request.message)
            debug = self._debug(outcome, decision, config)

            if not decision.accepted:
                return ChatResponse(
                    response=NO_INFORMATION_MESSAGE,
                    source=AnswerSource.NO_INFORMATION,
                    debug=debug,
                )

            prompt = await self._assembler.assemble(
                request.message, request.history, outcome.results, config
            )
            debug["estimatedTokens"] = prompt.estimated_tokens

            text = await self._backend.chat(
                config.model or self._default_config.model or "",
                prompt.as_dicts(),
                temperature=config.temperature,
                top_p=config.top_p,
                max_tokens=config.max_tokens,
            )
        except Exception as e:
            logger.exception("Answer generation failed for '%s'", request.message[:50])
            debug["error"] = str(e)
            return ChatResponse(response=APOLOGY_MESSAGE, source=AnswerSource.ERROR, debug=debug)

        source, references = self._attribute(outcome.results, text, AnswerSource.KNOWLEDGE_BASE)
        debug["usedReferences"] = len(references)
        return ChatResponse(response=text, source=source, references=references, debug=debug)

    # --- Streaming ---

    async def stream(self, request: ChatRequest) -> AsyncIterator[Envelope]:
        """
        Produce envelopes for one answer.

        Yields metadata and content envelopes as they become known, then a
        single done envelope. Closing the iterator early closes the model stream.
        """
        try:
            async with aclosing(self._stream_answer(request)) as envelopes:
                async for envelope in envelopes:
                    yield envelope
        except Exception as e:
            logger.exception("Streaming answer failed for '%s'", request.message[:50])
            yield MetadataEnvelope(
                source=AnswerSource.ERROR,
                debug={"query": request.message, "error": str(e)},
            )
            yield ContentEnvelope(content=APOLOGY_MESSAGE)
        yield DoneEnvelope()

    async def _stream_answer(self, request: ChatRequest) -> AsyncIterator[Envelope]:
        canned = match_predefined(request.message, self._predefined)
        if canned is not None:
            yield MetadataEnvelope(
                source=AnswerSource.PREDEFINED,
                debug={"query": request.message, "predefined": True},
            )
            yield ContentEnvelope(content=canned)
            return

        config = self._resolve_config(request)
        outcome, decision = await self._retrieve(request.message)
        debug = self._debug(outcome, decision, config)

        if not decision.accepted:
            yield MetadataEnvelope(source=AnswerSource.NO_INFORMATION, debug=debug)
            yield ContentEnvelope(content=NO_INFORMATION_MESSAGE)
            return

        prompt: AssembledPrompt = await self._assembler.assemble(
            request.message, request.history, outcome.results, config
        )
        debug["estimatedTokens"] = prompt.estimated_tokens

        source = AnswerSource.KNOWLEDGE_BASE
        references: list[Reference] = []
        yield MetadataEnvelope(source=source, references=references, debug=debug)

        answer = ""
        fragments = self._backend.stream_chat(
            config.model or self._default_config.model or "",
            prompt.as_dicts(),
            temperature=config.temperature,
            top_p=config.top_p,
            max_tokens=config.max_tokens,
        )
        async with aclosing(fragments):
            async for fragment in fragments:
                if not fragment:
                    continue
                answer += fragment
                yield ContentEnvelope(content=fragment)

                new_source, new_references = self._attribute(outcome.results, answer, source)
                if new_source != source or new_references != references:
                    source, references = new_source, new_references
                    yield MetadataEnvelope(
                        source=source,
                        references=references,
                        debug={**debug, "usedReferences": len(references)},
                    )

        logger.info(
            "Streamed answer: %d chars, source=%s, references=%d",
            len(answer),
            source.value,
            len(references),
        )
        yield MetadataEnvelope(
            source=source,
            references=references,
            debug={**debug, "usedReferences": len(references)},
        )

    # --- Helpers ---

    def _resolve_config(self, request: ChatRequest) -> GenerationConfig:
        if request.config is None:
            return self._default_config
        return request.config.merged_over(self._default_config)

    async def _retrieve(self, query: str) -> tuple[SearchOutcome, GateDecision]:
        outcome = await self._search.search(query)
        decision = self._gate.evaluate(outcome.results, outcome.terms)
        logger.info(
            "Query '%s': %d results, relevant=%s (%s)",
            query[:50],
            len(outcome.results),
            decision.accepted,
            decision.reason,
        )
        return outcome, decision

    def _attribute(
        self,
        candidates: list[SearchResult],
        answer: str,
        current: AnswerSource,
    ) -> tuple[AnswerSource, list[Reference]]:
        # A negative answer stays negative for the rest of the stream
        if current is AnswerSource.NO_INFORMATION or contains_no_info_phrase(answer):
            return AnswerSource.NO_INFORMATION, []
        return AnswerSource.KNOWLEDGE_BASE, self._filter.filter(candidates, answer)

    def _debug(
        self,
        outcome: SearchOutcome,
        decision: GateDecision,
        config: GenerationConfig,
    ) -> dict[str, Any]:
        return {
            "query": outcome.query,
            "keyTerms": list(outcome.terms.terms),
            "technicalTerms": list(outcome.terms.technical_terms),
            "resultsCount": len(outcome.results),
            "hasRelevantInfo": decision.accepted,
            "gateReason": decision.reason,
            "model": config.model,
            "topResults": [
                {
                    "title": r.title,
                    "relevance": round(r.relevance, 3),
                    "snippet": r.snippet[:100] + "...",
                }
                for r in outcome.results[:3]
            ],
        }
