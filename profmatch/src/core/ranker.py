"""
ProfMatch - Relevance Ranker
=============================
Secondary re-ranking of the candidates returned by the vector index.

Scoring
-------
::

    rank_score = 2.0 * rating
               + 1.5 * (5 - difficulty)
               + 2.0 if any keyword is a case-insensitive substring of the query

``rating`` defaults to 0 and ``difficulty`` to 3 when absent or not a
number.  Lower difficulty scores higher: difficulty 5 adds nothing,
difficulty 0 adds 7.5.  The keyword bonus is all-or-nothing.

The ranker performs no I/O and never mutates its input; the output is a
new list sorted by descending score, ties kept in index order.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from profmatch.src.core.models import CandidateRecord, RankedCandidate
from profmatch.src.utils.logger import get_logger
from profmatch.src.utils.text_utils import as_keyword_list, parse_number

logger = get_logger(__name__)

# ── Scoring weights ────────────────────────────────────────────────────
RATING_WEIGHT = 2.0
EASE_WEIGHT = 1.5
KEYWORD_BONUS = 2.0
MAX_DIFFICULTY = 5.0

DEFAULT_RATING = 0.0
DEFAULT_DIFFICULTY = 3.0


def keyword_matches(keywords: object, query_text: str) -> bool:
    """True if any keyword appears, case-insensitively, inside *query_text*."""
    query_lower = query_text.lower()
    return any(keyword.lower() in query_lower for keyword in as_keyword_list(keywords))


def score_candidate(metadata: Mapping[str, Any], query_text: str) -> float:
    """Compute the heuristic rank score for one candidate's metadata."""
    rating = parse_number(metadata.get("rating"), DEFAULT_RATING)
    difficulty = parse_number(metadata.get("difficulty"), DEFAULT_DIFFICULTY)
    bonus = KEYWORD_BONUS if keyword_matches(metadata.get("keywords"), query_text) else 0.0
    return RATING_WEIGHT * rating + EASE_WEIGHT * (MAX_DIFFICULTY - difficulty) + bonus


def rank_results(candidates: Sequence[CandidateRecord], query_text: str) -> list[RankedCandidate]:
    """
    Score every candidate and sort by descending ``rank_score``.

    ``sorted`` is stable, so equal scores keep the vector-search order.
    """
    scored = [RankedCandidate(record=record, rank_score=score_candidate(record.metadata, query_text)) for record in candidates]
    ranked = sorted(scored, key=lambda c: c.rank_score, reverse=True)
    logger.debug("[RANK] %d candidates ranked: %s", len(ranked), [(c.id, round(c.rank_score, 2)) for c in ranked])
    return ranked


def preserve_order(candidates: Sequence[CandidateRecord]) -> list[RankedCandidate]:
    """Wrap candidates unscored, in index order (ranking disabled)."""
    return [RankedCandidate(record=record, rank_score=None) for record in candidates]
