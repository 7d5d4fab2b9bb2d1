"""API request and response models.

The wire format uses camelCase keys; request models accept either spelling.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .case import MAX_PATIENT_AGE, Case, CaseStatus, CaseWithInsight, Insight, NewCase


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CaseCreateRequest(_CamelModel):
    """Request to create a new case.

    Unknown keys, including ``status``, are ignored.
    """

    title: str = Field(min_length=1)
    patient_name: str = Field(min_length=1)
    patient_age: Optional[int] = Field(default=None, ge=0, le=MAX_PATIENT_AGE)
    clinical_notes: Optional[str] = None
    transcript: Optional[str] = None
    audio_url: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    @field_validator("patient_age", mode="before")
    @classmethod
    def _blank_age_is_absent(cls, value: Any) -> Any:
        # Form clients send "" for an untouched number input
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_new_case(self) -> NewCase:
        return NewCase(
            title=self.title,
            patient_name=self.patient_name,
            patient_age=self.patient_age,
            clinical_notes=self.clinical_notes or None,
            transcript=self.transcript or None,
            audio_url=self.audio_url or None,
        )


class InsightResponse(_CamelModel):
    """Insight as returned to clients."""

    id: int
    case_id: int
    summary: Optional[str] = None
    blind_spots: List[str] = Field(default_factory=list)
    questions: List[str] = Field(default_factory=list)
    original_language: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_insight(cls, insight: Insight) -> "InsightResponse":
        return cls(
            id=insight.id,
            case_id=insight.case_id,
            summary=insight.summary,
            blind_spots=list(insight.blind_spots),
            questions=list(insight.questions),
            original_language=insight.original_language,
            created_at=insight.created_at,
        )


class CaseResponse(_CamelModel):
    """Response containing a single case."""

    id: int
    title: str
    patient_name: str
    patient_age: Optional[int] = None
    clinical_notes: Optional[str] = None
    transcript: Optional[str] = None
    audio_url: Optional[str] = None
    status: CaseStatus
    created_at: datetime

    @classmethod
    def from_case(cls, case: Case) -> "CaseResponse":
        """Convert Case model to response."""
        return cls(
            id=case.id,
            title=case.title,
            patient_name=case.patient_name,
            patient_age=case.patient_age,
            clinical_notes=case.clinical_notes,
            transcript=case.transcript,
            audio_url=case.audio_url,
            status=case.status,
            created_at=case.created_at,
        )


class CaseDetailResponse(CaseResponse):
    """A case with its insight (null until analysis completes)."""

    insight: Optional[InsightResponse] = None

    @classmethod
    def from_case_with_insight(cls, case: CaseWithInsight) -> "CaseDetailResponse":
        base = CaseResponse.from_case(case)
        return cls(
            **base.model_dump(),
            insight=InsightResponse.from_insight(case.insight) if case.insight else None,
        )


class TranscriptionResponse(BaseModel):
    """Plain transcript text."""

    text: str


class ErrorResponse(BaseModel):
    """Error body shared by all failing endpoints."""

    message: str
    field: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str
    database: str
