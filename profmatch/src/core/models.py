"""
ProfMatch - Data Model
=======================
Request-scoped value types shared by the pipeline stages.

``ConversationMessage``
    One chat turn as sent by the browser.  Validated by pydantic at the
    HTTP boundary.
``CandidateRecord``
    One nearest-neighbour hit from the professor index.  ``metadata`` is
    whatever the index stored; every key is optional and untyped.
``RankedCandidate``
    A ``CandidateRecord`` plus the heuristic ``rank_score``.
    ``rank_score`` is ``None`` only when ranking was disabled.

Records are frozen: ranking wraps them, it never edits them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Mapping

from pydantic import BaseModel

Role = Literal["user", "assistant", "system"]


class ConversationMessage(BaseModel):
    role: Role
    content: str


@dataclass(frozen=True, slots=True)
class CandidateRecord:
    id: str
    similarity_score: float
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only view so downstream stages cannot edit index metadata.
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


@dataclass(frozen=True, slots=True)
class RankedCandidate:
    record: CandidateRecord
    rank_score: float | None

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def metadata(self) -> Mapping[str, Any]:
        return self.record.metadata
