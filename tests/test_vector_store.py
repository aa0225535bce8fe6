"""
Tests for the LanceDB professor store (LanceDB mocked)
"""
import pytest
from unittest.mock import MagicMock, patch

from profmatch.src.database import vector_store as vs
from profmatch.src.database.vector_store import ProfessorVectorStore, row_to_candidate


@pytest.fixture
def mock_db():
    """Patch ``lancedb.connect`` and reset the connection cache."""
    vs._db_connection_cache.clear()
    db = MagicMock()
    db.table_names.return_value = ["professors"]
    table = MagicMock()
    db.open_table.return_value = table
    query = MagicMock()
    table.search.return_value.distance_type.return_value.limit.return_value = query
    query.where.return_value = query
    query.select.return_value = query
    with patch.object(vs.lancedb, "connect", return_value=db) as connect:
        yield {"connect": connect, "db": db, "table": table, "query": query}
    vs._db_connection_cache.clear()


ROWS = [
    {"id": "Dr. A", "vector": [0.1, 0.2], "subject": "Math", "rating": 4.5, "difficulty": 2.0, "keywords": ["calculus"], "reviewSnippet": "Clear.", "_distance": 0.25},
    {"id": "Dr. B", "vector": [0.3, 0.4], "subject": "Math", "rating": 3.9, "difficulty": None, "keywords": [], "reviewSnippet": "Okay.", "_distance": 0.5},
]


class TestSearch:

    def test_search_with_rating_filter(self, mock_db):
        mock_db["query"].to_list.return_value = ROWS
        store = ProfessorVectorStore(db_uri="/tmp/lancedb-test", table_name="professors")

        results = store.search([0.1, 0.2], top_k=10, min_rating=3.5)

        mock_db["table"].search.assert_called_once_with([0.1, 0.2])
        mock_db["table"].search.return_value.distance_type.assert_called_once_with("cosine")
        mock_db["table"].search.return_value.distance_type.return_value.limit.assert_called_once_with(10)
        mock_db["query"].where.assert_called_once_with("rating >= 3.5", prefilter=True)
        mock_db["query"].select.assert_not_called()
        assert [r.id for r in results] == ["Dr. A", "Dr. B"]
        assert results[0].similarity_score == pytest.approx(0.75)
        assert results[0].metadata["keywords"] == ["calculus"]

    def test_search_without_filter(self, mock_db):
        mock_db["query"].to_list.return_value = []
        store = ProfessorVectorStore(db_uri="/tmp/lancedb-test")

        assert store.search([0.0], top_k=3) == []
        mock_db["query"].where.assert_not_called()

    def test_ids_only(self, mock_db):
        mock_db["query"].to_list.return_value = [{"id": "Dr. A", "_distance": 0.1}]
        store = ProfessorVectorStore(db_uri="/tmp/lancedb-test")

        results = store.search([0.0], include_metadata=False)

        mock_db["query"].select.assert_called_once_with(["id"])
        assert dict(results[0].metadata) == {}

    def test_missing_table(self, mock_db):
        mock_db["db"].table_names.return_value = []
        store = ProfessorVectorStore(db_uri="/tmp/lancedb-test")

        with pytest.raises(RuntimeError, match="does not exist"):
            store.search([0.0])
        assert store.count() == 0

    def test_count(self, mock_db):
        mock_db["table"].count_rows.return_value = 42
        assert ProfessorVectorStore(db_uri="/tmp/lancedb-test").count() == 42


class TestConnection:

    def test_connection_is_cached_per_uri(self, mock_db):
        ProfessorVectorStore(db_uri="/tmp/lancedb-test")
        ProfessorVectorStore(db_uri="/tmp/lancedb-test")
        assert mock_db["connect"].call_count == 1

    def test_cloud_uri_passes_api_key(self, mock_db):
        ProfessorVectorStore(db_uri="db://professors", api_key="lance-key")
        mock_db["connect"].assert_called_once_with("db://professors", api_key="lance-key")


class TestRowToCandidate:

    def test_strips_reserved_and_null_columns(self):
        candidate = row_to_candidate(ROWS[1])
        assert candidate.id == "Dr. B"
        assert set(candidate.metadata) == {"subject", "rating", "keywords", "reviewSnippet"}
        assert candidate.similarity_score == pytest.approx(0.5)
