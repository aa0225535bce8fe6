"""
ProfMatch - RAG Engine
=======================
Orchestrates the retrieval-augmented recommendation pipeline.

``RAGManager``
    Stateless pipeline orchestrator.  Flow:
        1. Validate conversation → last message is the query
        2. Embed → query vector (Gemini embeddings)
        3. Retrieve → LanceDB nearest neighbours, ``rating >= MIN_RATING``
        4. Re-rank → rating / difficulty / keyword heuristic (optional)
        5. Assemble → system prompt + question + top-K candidate block
        6. Stream → Gemini chat completion, chunk by chunk

    Embedding, search and completion are sequential; each needs the
    previous stage's output.  Blocking SDK calls run in a worker thread.

Concurrency
-----------
- Collaborators (embedder, vector store, chat model) are built once at
  startup and injected; they are only read during a request.
- ``RAGManager`` keeps no request-scoped state and is shared across requests.

Usage:
    from profmatch.src.core.rag_engine import RAGManager
    rag = RAGManager(vector_store, embedder)
    chunks = await rag.open_stream(messages)
    async for text in chunks:
        ...
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from profmatch.config.settings import settings
from profmatch.src.core.models import CandidateRecord, ConversationMessage, RankedCandidate
from profmatch.src.core.prompt_assembler import assemble_messages
from profmatch.src.core.ranker import preserve_order, rank_results
from profmatch.src.core.stream_relay import close_upstream
from profmatch.src.utils.logger import get_logger
from profmatch.src.utils.text_utils import clean_query

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  COLLABORATOR PROTOCOLS
# ══════════════════════════════════════════════════════════════════════


@runtime_checkable
class Embedder(Protocol):
    """Anything that can turn a query into an embedding vector."""

    def embed_query(self, text: str) -> list[float]: ...


@runtime_checkable
class VectorSearch(Protocol):
    """Nearest-neighbour lookup returning candidates in index order."""

    def search(self, query_vector: list[float], top_k: int = 10, include_metadata: bool = True, min_rating: float | None = None) -> list[CandidateRecord]: ...


@runtime_checkable
class ChatModel(Protocol):
    """Streaming chat model (LangChain ``BaseChatModel`` satisfies this)."""

    def astream(self, input: Any, **kwargs: Any) -> AsyncIterator[Any]: ...


# ══════════════════════════════════════════════════════════════════════
#  ERRORS
# ══════════════════════════════════════════════════════════════════════


class InvalidConversationError(ValueError):
    """The inbound conversation cannot be answered (empty, or blank last message)."""


class UpstreamServiceError(RuntimeError):
    """
    An external collaborator failed.

    ``stage`` is one of ``"embedding"``, ``"search"``, ``"completion"``;
    the message is the collaborator's own error text.
    """

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage


# ══════════════════════════════════════════════════════════════════════
#  PREPARED PROMPT
# ══════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PreparedPrompt:
    query: str
    candidates: list[RankedCandidate]
    messages: list[ConversationMessage]
    ranking_enabled: bool


_LC_MESSAGE_TYPES: dict[str, type[BaseMessage]] = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_messages(messages: Sequence[ConversationMessage]) -> list[BaseMessage]:
    return [_LC_MESSAGE_TYPES[m.role](content=m.content) for m in messages]


def chunk_text(chunk: Any) -> str:
    """
    Extract plain text from a streamed chat chunk.

    Gemini may emit ``content`` as a list of parts; only text parts are kept.
    """
    content = getattr(chunk, "content", chunk)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return ""


async def _prepend(first: str, rest: AsyncIterator[str]) -> AsyncIterator[str]:
    try:
        yield first
        async for text in rest:
            yield text
    finally:
        await close_upstream(rest)


# ══════════════════════════════════════════════════════════════════════
#  RAG MANAGER
# ══════════════════════════════════════════════════════════════════════


class RAGManager:
    """
    Orchestrates the recommendation pipeline: embed → retrieve → rank → assemble → stream.

    Parameters
    ----------
    vector_store
        A ``VectorSearch`` implementation (normally ``ProfessorVectorStore``).
    embedder
        An ``Embedder``-compatible object for query embedding.
    llm
        Optional ``ChatModel``; defaults to Gemini via LangChain.
    """

    __slots__ = ("_store", "_embedder", "_llm")

    def __init__(self, vector_store: VectorSearch, embedder: Embedder, llm: ChatModel | None = None) -> None:
        self._store = vector_store
        self._embedder = embedder
        self._llm = llm or self._init_llm()


    @staticmethod
    def _init_llm() -> ChatModel:
        """Initialise the Gemini chat model via LangChain."""
        from langchain_google_genai import ChatGoogleGenerativeAI

        llm = ChatGoogleGenerativeAI(model=settings.LLM_MODEL, temperature=settings.LLM_TEMPERATURE, google_api_key=settings.GOOGLE_API_KEY.get_secret_value())
        logger.info("LLM initialised: %s (temperature=%.1f)", settings.LLM_MODEL, settings.LLM_TEMPERATURE)
        return llm

    # ══════════════════════════════════════════════════════════════════
    #  RETRIEVAL
    # ══════════════════════════════════════════════════════════════════

    async def retrieve(self, query_text: str) -> list[CandidateRecord]:
        """Embed *query_text* and fetch the nearest professors from the index."""
        t_embed = time.perf_counter()
        try:
            vector = await asyncio.to_thread(self._embedder.embed_query, clean_query(query_text))
        except Exception as exc:
            logger.error("[RAG] Embedding failed: %s", exc)
            raise UpstreamServiceError("embedding", str(exc)) from exc
        embed_ms = (time.perf_counter() - t_embed) * 1000

        t_search = time.perf_counter()
        try:
            candidates = await asyncio.to_thread(self._store.search, vector, settings.SEARCH_TOP_K, True, settings.MIN_RATING)
        except Exception as exc:
            logger.error("[RAG] Vector search failed: %s", exc)
            raise UpstreamServiceError("search", str(exc)) from exc
        search_ms = (time.perf_counter() - t_search) * 1000

        logger.info("[RAG] Retrieved %d candidate(s) (embed=%.1fms, search=%.1fms, dim=%d)", len(candidates), embed_ms, search_ms, len(vector))
        return candidates

    # ══════════════════════════════════════════════════════════════════
    #  PROMPT PREPARATION
    # ══════════════════════════════════════════════════════════════════

    @staticmethod
    def latest_query(conversation: Sequence[ConversationMessage]) -> str:
        """Return the newest message's text, rejecting empty conversations."""
        if not conversation:
            raise InvalidConversationError("Request must contain at least one message.")
        query = conversation[-1].content
        if not clean_query(query):
            raise InvalidConversationError("The last message must not be empty.")
        return query


    async def prepare(self, conversation: Sequence[ConversationMessage], ranking_enabled: bool | None = None) -> PreparedPrompt:
        """Validate, retrieve, rank and assemble the prompt for one request."""
        query = self.latest_query(conversation)
        enabled = settings.RANKING_ENABLED if ranking_enabled is None else ranking_enabled

        candidates = await self.retrieve(query)
        ranked = rank_results(candidates, query) if enabled else preserve_order(candidates)
        messages = assemble_messages(query, ranked, settings.PROMPT_TOP_K)

        logger.info("[RAG] Prompt assembled: %d/%d candidate(s) injected (ranking=%s): %s", min(len(ranked), settings.PROMPT_TOP_K), len(ranked), enabled, [c.id for c in ranked[: settings.PROMPT_TOP_K]])
        return PreparedPrompt(query=query, candidates=ranked, messages=messages, ranking_enabled=enabled)

    # ══════════════════════════════════════════════════════════════════
    #  COMPLETION
    # ══════════════════════════════════════════════════════════════════

    async def stream_answer(self, prepared: PreparedPrompt) -> AsyncIterator[str]:
        """Stream the completion's text chunks in arrival order."""
        stream: AsyncIterator[Any] | None = None
        try:
            stream = self._llm.astream(to_langchain_messages(prepared.messages))
            async for chunk in stream:
                text = chunk_text(chunk)
                if text:
                    yield text
        except Exception as exc:
            logger.error("[RAG] Completion stream failed: %s", exc)
            raise UpstreamServiceError("completion", str(exc)) from exc
        finally:
            if stream is not None:
                await close_upstream(stream)


    async def open_stream(self, conversation: Sequence[ConversationMessage], ranking_enabled: bool | None = None) -> AsyncIterator[str]:
        """
        Run the pipeline up to the first completion chunk.

        Any failure before the first chunk raises here, so the caller can
        still answer with an error status.  The returned iterator yields
        the first chunk followed by the rest of the stream.
        """
        t_start = time.perf_counter()
        prepared = await self.prepare(conversation, ranking_enabled)

        upstream = self.stream_answer(prepared)
        try:
            first = await anext(upstream)
        except StopAsyncIteration:
            logger.warning("[RAG] Completion returned no text.")
            first = ""

        logger.info("[RAG] First token after %.1fms", (time.perf_counter() - t_start) * 1000)
        return _prepend(first, upstream)
