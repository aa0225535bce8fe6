"""
Shared fixtures: deterministic settings and fake collaborators.

Settings are read at import time, so the environment is seeded here,
before any ``profmatch`` module is imported.
"""
import os

os.environ.update({"GOOGLE_API_KEY": "test-google-key", "ENV": "dev", "SEARCH_TOP_K": "10", "PROMPT_TOP_K": "5", "MIN_RATING": "3.5", "RANKING_ENABLED": "true", "LANCEDB_TABLE_NAME": "professors"})
for _key in ("LOG_LEVEL", "LOG_FORMAT"):
    os.environ.pop(_key, None)

import pytest
from langchain_core.messages import AIMessageChunk

from profmatch.src.core.models import CandidateRecord, ConversationMessage


class FakeEmbedder:
    """Records queries and returns a fixed vector."""

    def __init__(self, vector=None, error=None):
        self.vector = vector or [0.1, 0.2, 0.3]
        self.error = error
        self.calls = []

    def embed_query(self, text):
        self.calls.append(text)
        if self.error:
            raise self.error
        return self.vector


class FakeVectorStore:
    """Returns canned candidates and records search arguments."""

    def __init__(self, candidates=(), error=None, rows=0):
        self.candidates = list(candidates)
        self.error = error
        self.rows = rows
        self.calls = []

    def search(self, query_vector, top_k=10, include_metadata=True, min_rating=None):
        self.calls.append({"query_vector": query_vector, "top_k": top_k, "include_metadata": include_metadata, "min_rating": min_rating})
        if self.error:
            raise self.error
        return list(self.candidates)

    def count(self):
        return self.rows


class FakeChatModel:
    """
    Streams canned chunks like ``BaseChatModel.astream``.

    ``fail_at`` is the chunk index at which ``error`` is raised.
    """

    def __init__(self, chunks=("Hello", " world"), error=None, fail_at=None):
        self.chunks = list(chunks)
        self.error = error
        self.fail_at = fail_at
        self.calls = []
        self.closed = False

    async def astream(self, input, **kwargs):
        self.calls.append(input)
        try:
            for i, text in enumerate(self.chunks):
                if self.error is not None and self.fail_at == i:
                    raise self.error
                yield AIMessageChunk(content=text)
            if self.error is not None and (self.fail_at is None or self.fail_at >= len(self.chunks)):
                raise self.error
        finally:
            self.closed = True


def make_candidate(pid, similarity=0.9, **metadata):
    return CandidateRecord(id=pid, similarity_score=similarity, metadata=metadata)


@pytest.fixture
def biology_candidates():
    """Two biology professors; the second is easier and should rank first."""
    return [
        make_candidate("Dr. Hard Biology", 0.95, subject="Biology", rating=4.0, difficulty=4.5, keywords=["genetics"], reviewSnippet="Tough but fair."),
        make_candidate("Dr. Easy Biology", 0.90, subject="Biology", rating="4.2", difficulty="1.5", keywords=["easy", "biology"], reviewSnippet="Very approachable."),
    ]


@pytest.fixture
def conversation():
    return [
        ConversationMessage(role="assistant", content="Hi! How can I help you today?"),
        ConversationMessage(role="user", content="recommend an easy biology professor"),
    ]


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def store(biology_candidates):
    return FakeVectorStore(biology_candidates, rows=2)


@pytest.fixture
def chat_model():
    return FakeChatModel()
