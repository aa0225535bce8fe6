"""
ProfMatch - Prompt Assembler
=============================
Turns the ranked candidates into the two-message prompt sent to the
completion model::

    [system: SYSTEM_PROMPT,
     user:   <original question> + <candidate block>]

The candidate block is a fixed header followed by at most ``limit``
entries in ranked order.  Absent metadata renders as ``N/A`` so
assembly never fails on sparse index rows.
"""

from __future__ import annotations

from collections.abc import Sequence

from profmatch.config.prompt_templates import CANDIDATE_BLOCK_HEADER, CANDIDATE_ENTRY_TEMPLATE, SYSTEM_PROMPT
from profmatch.src.core.models import ConversationMessage, RankedCandidate
from profmatch.src.utils.text_utils import MISSING, as_keyword_list, display_value

DEFAULT_PROMPT_TOP_K = 5


def _format_score(score: float | None) -> str:
    return MISSING if score is None else f"{score:.2f}"


def format_candidate(candidate: RankedCandidate) -> str:
    """Render a single candidate entry."""
    meta = candidate.metadata
    return CANDIDATE_ENTRY_TEMPLATE.format(
        professor=candidate.id,
        subject=display_value(meta.get("subject")),
        rating=display_value(meta.get("rating")),
        difficulty=display_value(meta.get("difficulty")),
        keywords=", ".join(as_keyword_list(meta.get("keywords"))),
        review_snippet=display_value(meta.get("reviewSnippet", meta.get("review_snippet"))),
        rank_score=_format_score(candidate.rank_score),
    )


def format_candidate_block(ranked: Sequence[RankedCandidate], limit: int = DEFAULT_PROMPT_TOP_K) -> str:
    """Header plus the first *limit* candidates, in the order given."""
    entries = [format_candidate(candidate) for candidate in ranked[:limit]]
    return CANDIDATE_BLOCK_HEADER + "".join(entries)


def build_user_content(original_text: str, ranked: Sequence[RankedCandidate], limit: int = DEFAULT_PROMPT_TOP_K) -> str:
    return original_text + format_candidate_block(ranked, limit)


def assemble_messages(original_text: str, ranked: Sequence[RankedCandidate], limit: int = DEFAULT_PROMPT_TOP_K) -> list[ConversationMessage]:
    """Build the final ``[system, user]`` message list for the completion call."""
    return [
        ConversationMessage(role="system", content=SYSTEM_PROMPT),
        ConversationMessage(role="user", content=build_user_content(original_text, ranked, limit)),
    ]
