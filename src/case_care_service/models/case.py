"""Case and insight domain models.

A case moves through a small, one-way lifecycle::

    pending -> analyzing -> completed
                        \\-> failed

``completed`` and ``failed`` are terminal. Status changes go through
``CaseStatus.transition_to`` so an illegal sequence can never be written.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from case_care_service.exceptions import InvalidStatusTransitionError


# Oldest accepted patient age; also keeps the value inside an INTEGER column
MAX_PATIENT_AGE = 150


class CaseStatus(str, Enum):
    """Case analysis lifecycle status."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (CaseStatus.COMPLETED, CaseStatus.FAILED)

    def can_transition_to(self, target: "CaseStatus") -> bool:
        return target in _ALLOWED_TRANSITIONS[self]

    def transition_to(self, target: "CaseStatus") -> "CaseStatus":
        """Return ``target`` if the move is legal, raise otherwise."""
        target = CaseStatus(target)
        if not self.can_transition_to(target):
            raise InvalidStatusTransitionError(self, target)
        return target


_ALLOWED_TRANSITIONS = {
    CaseStatus.PENDING: frozenset({CaseStatus.ANALYZING}),
    CaseStatus.ANALYZING: frozenset({CaseStatus.COMPLETED, CaseStatus.FAILED}),
    CaseStatus.COMPLETED: frozenset(),
    CaseStatus.FAILED: frozenset(),
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops the offset on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class NewCase(BaseModel):
    """Validated case fields ready to be persisted.

    Carries no status; every new case starts ``pending``.
    """

    title: str = Field(min_length=1)
    patient_name: str = Field(min_length=1)
    patient_age: Optional[int] = Field(default=None, ge=0, le=MAX_PATIENT_AGE)
    clinical_notes: Optional[str] = None
    transcript: Optional[str] = None
    audio_url: Optional[str] = None


class Case(BaseModel):
    """Case domain model."""

    id: int
    title: str
    patient_name: str
    patient_age: Optional[int] = None
    clinical_notes: Optional[str] = None
    transcript: Optional[str] = None
    audio_url: Optional[str] = None
    status: CaseStatus = CaseStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(from_attributes=True)


class InsightDraft(BaseModel):
    """Structured analysis output before it is attached to a case."""

    summary: Optional[str] = None
    blind_spots: List[str] = Field(default_factory=list)
    questions: List[str] = Field(default_factory=list)
    original_language: Optional[str] = None


class Insight(InsightDraft):
    """Persisted insight; at most one per case."""

    id: int
    case_id: int
    created_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(from_attributes=True)


class CaseWithInsight(Case):
    """A case joined with its insight, if one exists."""

    insight: Optional[Insight] = None
