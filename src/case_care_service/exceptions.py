"""Service exception hierarchy.

Each error carries the information its HTTP mapping needs; the mapping itself
lives in ``case_care_service.api.errors``.
"""

from typing import Optional


class CaseServiceError(Exception):
    """Base class for all service errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CaseServiceError):
    """Client input is malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(CaseServiceError):
    """Referenced case or insight does not exist."""


class UpstreamServiceError(CaseServiceError):
    """The external generation/transcription call failed or returned unusable content."""


class StorageError(CaseServiceError):
    """The persistence layer failed."""


class DuplicateInsightError(StorageError):
    """An insight already exists for the case."""

    def __init__(self, case_id: int):
        super().__init__(f"Insight already exists for case {case_id}")
        self.case_id = case_id


class InvalidStatusTransitionError(CaseServiceError):
    """A status change that the case lifecycle does not allow."""

    def __init__(self, current, target):
        super().__init__(
            f"Illegal status transition {getattr(current, 'value', current)} -> "
            f"{getattr(target, 'value', target)}"
        )
        self.current = current
        self.target = target
