"""
ProfMatch - ProfessorVectorStore
=================================
Read-only wrapper around the LanceDB professor table providing:
  • A cached connection per database URI (local path or ``db://`` cloud)
  • Nearest-neighbour search by query vector with an optional
    minimum-rating prefilter
  • Conversion of raw rows into ``CandidateRecord`` objects

Design decisions:
  • **Singleton DB connection**: ``_get_connection()`` caches the
    ``lancedb.DBConnection`` at module level, shared by every request.
  • **Vector in, records out**: embedding happens upstream, so this
    module never talks to the embedding provider.
  • **No ingestion**: the table is built and maintained elsewhere;
    ``PROFESSOR_SCHEMA`` documents the layout this module expects.

Usage:
    from profmatch.src.database.vector_store import ProfessorVectorStore

    store = ProfessorVectorStore()
    candidates = store.search(query_vector, top_k=10, min_rating=3.5)
"""

from __future__ import annotations

import threading
from typing import Any

import lancedb
import pyarrow as pa

from profmatch.config.settings import settings
from profmatch.src.core.models import CandidateRecord
from profmatch.src.utils.logger import get_logger

logger = get_logger(__name__)

# ── Type Aliases ──────────────────────────────────────────────────────
SearchRow = dict[str, Any]

# ── LanceDB Table Schema ──────────────────────────────────────────────
PROFESSOR_SCHEMA = pa.schema([
    pa.field("id", pa.utf8()),
    pa.field("vector", pa.list_(pa.float32())),
    pa.field("subject", pa.utf8()),
    pa.field("rating", pa.float32()),
    pa.field("difficulty", pa.float32()),
    pa.field("keywords", pa.list_(pa.utf8())),
    pa.field("reviewSnippet", pa.utf8()),
])

# Columns that are never copied into candidate metadata
_RESERVED_COLUMNS = {"id", "vector", "_distance"}
_DISTANCE_TYPE = "cosine"

# ── Connection cache ───────────────────────────────────────────────────
_DB_LOCK = threading.Lock()
_db_connection_cache: dict[str, lancedb.DBConnection] = {}


def _get_connection(db_uri: str, api_key: str | None = None) -> lancedb.DBConnection:
    """
    Return a **singleton** ``lancedb.DBConnection`` for *db_uri*.

    Thread-safe via ``_DB_LOCK``.
    """
    if db_uri not in _db_connection_cache:
        with _DB_LOCK:
            if db_uri not in _db_connection_cache:
                logger.info("Opening new LanceDB connection: %s", db_uri)
                if api_key:
                    _db_connection_cache[db_uri] = lancedb.connect(db_uri, api_key=api_key)
                else:
                    _db_connection_cache[db_uri] = lancedb.connect(db_uri)
    return _db_connection_cache[db_uri]


def row_to_candidate(row: SearchRow) -> CandidateRecord:
    """Convert one LanceDB result row into a ``CandidateRecord``."""
    distance = float(row.get("_distance", 1.0))
    metadata = {key: value for key, value in row.items() if key not in _RESERVED_COLUMNS and value is not None}
    return CandidateRecord(id=str(row.get("id", "")), similarity_score=1.0 - distance, metadata=metadata)


class ProfessorVectorStore:
    """
    Read-only view over the professor table.

    Parameters
    ----------
    db_uri
        Override the database location.  Defaults to ``settings.LANCEDB_URI``.
    table_name
        Override the table name.  Defaults to ``settings.LANCEDB_TABLE_NAME``.
    api_key
        LanceDB Cloud key.  Defaults to ``settings.LANCEDB_API_KEY``.
    """

    __slots__ = ("_db_uri", "_table_name", "_api_key", "db", "_table")

    def __init__(self, db_uri: str | None = None, table_name: str | None = None, api_key: str | None = None) -> None:
        self._db_uri: str = str(db_uri or settings.LANCEDB_URI)
        self._table_name: str = table_name or settings.LANCEDB_TABLE_NAME
        if api_key is None and settings.LANCEDB_API_KEY is not None:
            api_key = settings.LANCEDB_API_KEY.get_secret_value()
        self._api_key: str | None = api_key
        self.db: lancedb.DBConnection = _get_connection(self._db_uri, self._api_key)
        self._table: Any = None


    def _open_table(self) -> Any:
        """Lazily open the table, cache the handle."""
        if self._table is None:
            if not self.table_exists():
                raise RuntimeError(f"Professor table '{self._table_name}' does not exist at {self._db_uri}. Load the review index first.")
            self._table = self.db.open_table(self._table_name)
            logger.info("Opened table '%s'.", self._table_name)
        return self._table


    def table_exists(self) -> bool:
        return self._table_name in self.db.table_names()


    def search(self, query_vector: list[float], top_k: int = 10, include_metadata: bool = True, min_rating: float | None = None) -> list[CandidateRecord]:
        """
        Nearest-neighbour search over the professor table.

        Parameters
        ----------
        query_vector
            Embedding of the user's question.
        top_k
            Maximum number of candidates.
        include_metadata
            When False only ids and distances are fetched.
        min_rating
            Optional prefilter, ``rating >= min_rating``.

        Returns
        -------
        list[CandidateRecord]
            Candidates in index order (closest first).
        """
        table = self._open_table()
        query = table.search(query_vector).distance_type(_DISTANCE_TYPE).limit(top_k)

        if min_rating is not None:
            where_str = f"rating >= {float(min_rating)}"
            query = query.where(where_str, prefilter=True)
            logger.info("Searching with filter: %s (limit=%d)", where_str, top_k)
        else:
            logger.info("Searching without filters (limit=%d).", top_k)

        if not include_metadata:
            query = query.select(["id"])

        rows: list[SearchRow] = query.to_list()
        logger.info("Search returned %d results.", len(rows))
        return [row_to_candidate(row) for row in rows]


    def count(self) -> int:
        """Return the total number of rows in the table."""
        if not self.table_exists():
            return 0
        return self._open_table().count_rows()


    def __repr__(self) -> str:
        return f"ProfessorVectorStore(db='{self._db_uri}', table='{self._table_name}')"
