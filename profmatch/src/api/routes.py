"""
ProfMatch - API Routes
=======================
Thin controllers between HTTP and the RAG engine:
  - ``POST /api/chat`` → stream a professor recommendation
  - ``GET  /health``   → liveness + index row count
  - ``GET  /``         → chat UI

No business logic lives here.  The ``RAGManager`` is built once at
startup and reached through the ``get_rag_manager`` dependency, which
tests override.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, JSONResponse, StreamingResponse

from profmatch.src.core.models import ConversationMessage
from profmatch.src.core.rag_engine import InvalidConversationError, RAGManager, UpstreamServiceError
from profmatch.src.core.stream_relay import relay_stream
from profmatch.src.utils.logger import get_logger

logger = get_logger(__name__)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

router = APIRouter()


def get_rag_manager(request: Request) -> RAGManager:
    return request.app.state.rag_manager


@router.post("/api/chat")
async def chat(messages: list[ConversationMessage], ranking: bool | None = None, rag: RAGManager = Depends(get_rag_manager)):
    """
    Answer the last message of *messages* with a streamed recommendation.

    Errors raised before the first token become JSON error responses;
    errors after that abort the stream.
    """
    try:
        chunks = await rag.open_stream(messages, ranking_enabled=ranking)
    except InvalidConversationError as exc:
        logger.warning("[API] Rejected request: %s", exc)
        return JSONResponse(status_code=400, content={"error": str(exc)})
    except UpstreamServiceError as exc:
        logger.exception("[API] %s stage failed.", exc.stage)
        return JSONResponse(status_code=500, content={"error": str(exc)})
    except Exception as exc:
        logger.exception("[API] Error in POST /api/chat.")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    return StreamingResponse(relay_stream(chunks), media_type="text/plain; charset=utf-8")


@router.get("/health")
async def health(request: Request):
    rows: int | None = None
    store = getattr(request.app.state, "vector_store", None)
    if store is not None:
        try:
            rows = await asyncio.to_thread(store.count)
        except Exception as exc:
            logger.warning("[API] Health check could not count index rows: %s", exc)
    return {"status": "ok", "rows": rows}


@router.get("/", include_in_schema=False)
async def index() -> FileResponse:
    return FileResponse(STATIC_DIR / "index.html", media_type="text/html")
