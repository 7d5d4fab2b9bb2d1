"""Case Repository for case and insight persistence.

This module provides the repository pattern for the Case and Insight domain
models. It abstracts storage operations and provides clean interfaces for the
service layer and the background analysis task.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from case_care_service.exceptions import DuplicateInsightError, StorageError
from case_care_service.models.case import (
    Case,
    CaseStatus,
    CaseWithInsight,
    Insight,
    InsightDraft,
    NewCase,
    utc_now,
)


# ============================================================
# Repository Interface
# ============================================================

class CaseRepository(ABC):
    """
    Abstract repository interface for Case and Insight persistence.

    Implementations:
    - SQLCaseRepository: Production database (SQLite/PostgreSQL)
    - InMemoryCaseRepository: Testing and development
    """

    @abstractmethod
    async def create_case(self, data: NewCase) -> Case:
        """
        Persist a new case.

        The stored status is always ``pending``.

        Args:
            data: Validated case fields

        Returns:
            Persisted case with generated id and creation timestamp

        Raises:
            StorageError: If the insert fails
        """

    @abstractmethod
    async def get_case(self, case_id: int) -> Optional[CaseWithInsight]:
        """
        Retrieve a case joined with its insight.

        Args:
            case_id: Case identifier

        Returns:
            Case with ``insight`` set when one exists, None if no such case

        Raises:
            StorageError: If retrieval fails
        """

    @abstractmethod
    async def list_cases(self) -> List[Case]:
        """
        List all cases, newest first.

        Raises:
            StorageError: If the query fails
        """

    @abstractmethod
    async def update_case_status(self, case_id: int, status: CaseStatus) -> Optional[Case]:
        """
        Set the status of a case.

        Callers are responsible for checking that the transition is legal.

        Returns:
            Updated case, or None if the case no longer exists

        Raises:
            StorageError: If the update fails
        """

    @abstractmethod
    async def create_insight(self, case_id: int, data: InsightDraft) -> Insight:
        """
        Attach the insight for a case.

        Raises:
            DuplicateInsightError: If the case already has an insight
            StorageError: If the insert fails
        """

    @abstractmethod
    async def get_insight_by_case_id(self, case_id: int) -> Optional[Insight]:
        """
        Retrieve the insight of a case.

        Returns:
            Insight if one exists, None otherwise
        """

    @abstractmethod
    async def delete_case(self, case_id: int) -> bool:
        """
        Delete a case and its insight.

        Returns:
            True if deleted, False if not found

        Raises:
            StorageError: If deletion fails
        """


# ============================================================
# In-Memory Implementation (for Testing)
# ============================================================

class InMemoryCaseRepository(CaseRepository):
    """
    In-memory case repository for testing and development.

    Data stored in dictionaries, not persistent across restarts.
    """

    def __init__(self):
        """Initialize empty in-memory store."""
        self._cases: Dict[int, Case] = {}
        self._insights: Dict[int, Insight] = {}
        self._next_case_id = 1
        self._next_insight_id = 1

    async def create_case(self, data: NewCase) -> Case:
        case = Case(
            id=self._next_case_id,
            status=CaseStatus.PENDING,
            created_at=utc_now(),
            **data.model_dump(),
        )
        self._next_case_id += 1
        self._cases[case.id] = case
        return case.model_copy()

    async def get_case(self, case_id: int) -> Optional[CaseWithInsight]:
        case = self._cases.get(case_id)
        if case is None:
            return None
        insight = self._insights.get(case_id)
        return CaseWithInsight(
            **case.model_dump(),
            insight=insight.model_copy(deep=True) if insight else None,
        )

    async def list_cases(self) -> List[Case]:
        cases = [c.model_copy() for c in self._cases.values()]
        # Ties on created_at fall back to id so the newest insert still sorts first
        cases.sort(key=lambda c: (c.created_at, c.id), reverse=True)
        return cases

    async def update_case_status(self, case_id: int, status: CaseStatus) -> Optional[Case]:
        case = self._cases.get(case_id)
        if case is None:
            return None
        updated = case.model_copy(update={"status": CaseStatus(status)})
        self._cases[case_id] = updated
        return updated.model_copy()

    async def create_insight(self, case_id: int, data: InsightDraft) -> Insight:
        if case_id not in self._cases:
            raise StorageError(f"Cannot attach insight: case {case_id} does not exist")
        if case_id in self._insights:
            raise DuplicateInsightError(case_id)
        insight = Insight(
            id=self._next_insight_id,
            case_id=case_id,
            created_at=utc_now(),
            **data.model_dump(),
        )
        self._next_insight_id += 1
        self._insights[case_id] = insight
        return insight.model_copy(deep=True)

    async def get_insight_by_case_id(self, case_id: int) -> Optional[Insight]:
        insight = self._insights.get(case_id)
        return insight.model_copy(deep=True) if insight else None

    async def delete_case(self, case_id: int) -> bool:
        if case_id not in self._cases:
            return False
        del self._cases[case_id]
        self._insights.pop(case_id, None)
        return True

    def clear(self):
        """Clear all cases and insights (testing utility)."""
        self._cases.clear()
        self._insights.clear()
