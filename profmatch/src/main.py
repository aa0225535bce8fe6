"""
ProfMatch - Application Entry Point
====================================
FastAPI application factory.  Registers the routes from
``profmatch.src.api.routes`` and configures CORS.

On startup the lifespan builds the long-lived collaborators exactly
once: the Gemini embedder, the LanceDB professor store, and the
``RAGManager`` that wraps them.  Request handlers only read them.

Run:
    uvicorn profmatch.src.main:app --reload
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from profmatch.config.settings import settings
from profmatch.src.api.routes import router
from profmatch.src.core.rag_engine import RAGManager, VectorSearch
from profmatch.src.utils.logger import get_logger

logger = get_logger(__name__)


def build_rag_manager() -> tuple[RAGManager, VectorSearch]:
    """Create the embedder, vector store and RAG manager from settings."""
    from langchain_google_genai import GoogleGenerativeAIEmbeddings

    from profmatch.src.database.vector_store import ProfessorVectorStore

    embedder = GoogleGenerativeAIEmbeddings(model=settings.EMBEDDING_MODEL, google_api_key=settings.GOOGLE_API_KEY.get_secret_value())
    logger.info("Embedder initialised: %s", settings.EMBEDDING_MODEL)
    store = ProfessorVectorStore()
    return RAGManager(store, embedder), store


def create_app(rag_manager: RAGManager | None = None, vector_store: VectorSearch | None = None) -> FastAPI:
    """
    Build the FastAPI app.

    Passing *rag_manager* skips collaborator construction at startup
    (used by tests and by embedding the app elsewhere).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "rag_manager", None) is None:
            app.state.rag_manager, app.state.vector_store = build_rag_manager()
        logger.info("ProfMatch ready (env=%s, llm=%s, table=%s).", settings.ENV, settings.LLM_MODEL, settings.LANCEDB_TABLE_NAME)
        yield

    app = FastAPI(title="ProfMatch", version="0.1.0", lifespan=lifespan)
    app.state.rag_manager = rag_manager
    app.state.vector_store = vector_store
    app.add_middleware(CORSMiddleware, allow_origins=settings.CORS_ORIGINS, allow_methods=["GET", "POST"], allow_headers=["*"])
    app.include_router(router)
    return app


app = create_app()
