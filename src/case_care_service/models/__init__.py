"""Models package."""

from .case import (
    Case,
    CaseStatus,
    CaseWithInsight,
    Insight,
    InsightDraft,
    NewCase,
)
from .requests import (
    CaseCreateRequest,
    CaseDetailResponse,
    CaseResponse,
    ErrorResponse,
    HealthResponse,
    InsightResponse,
    TranscriptionResponse,
)

__all__ = [
    "Case",
    "CaseStatus",
    "CaseWithInsight",
    "Insight",
    "InsightDraft",
    "NewCase",
    "CaseCreateRequest",
    "CaseDetailResponse",
    "CaseResponse",
    "ErrorResponse",
    "HealthResponse",
    "InsightResponse",
    "TranscriptionResponse",
]
