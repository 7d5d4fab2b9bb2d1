"""SQL Case Repository - Production Implementation.

Implements the CaseRepository interface over two normalized tables:

    cases (main table)
    └── insights (1:0..1, UNIQUE case_id, ON DELETE CASCADE)

Every write commits on its own. A status update and an insight insert are two
separate transactions, so the background task orders them: insight first,
then ``completed``.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from case_care_service.exceptions import DuplicateInsightError, StorageError
from case_care_service.infrastructure.database.models import CaseDB, InsightDB
from case_care_service.infrastructure.persistence.case_repository import CaseRepository
from case_care_service.models.case import (
    Case,
    CaseStatus,
    CaseWithInsight,
    Insight,
    InsightDraft,
    NewCase,
    as_utc,
)

logger = logging.getLogger(__name__)


class SQLCaseRepository(CaseRepository):
    """
    SQLAlchemy repository for SQLite (development) and PostgreSQL (production).
    """

    def __init__(self, db_session: AsyncSession):
        """
        Initialize repository with SQLAlchemy async session.

        Args:
            db_session: SQLAlchemy AsyncSession for database operations
        """
        self.db = db_session

    # ========================================================================
    # Cases
    # ========================================================================

    async def create_case(self, data: NewCase) -> Case:
        try:
            row = CaseDB(
                status=CaseStatus.PENDING,
                created_at=datetime.now(timezone.utc),
                **data.model_dump(),
            )
            self.db.add(row)
            await self.db.commit()
            return self._row_to_case(row)

        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to create case: {e}") from e

    async def get_case(self, case_id: int) -> Optional[CaseWithInsight]:
        try:
            result = await self.db.execute(
                select(CaseDB)
                .options(selectinload(CaseDB.insight))
                .where(CaseDB.id == case_id)
                .execution_options(populate_existing=True)
            )
            row = result.scalar_one_or_none()
            if row is None:
                return None

            return CaseWithInsight(
                **self._row_to_case(row).model_dump(),
                insight=self._row_to_insight(row.insight) if row.insight else None,
            )

        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get case {case_id}: {e}") from e

    async def list_cases(self) -> List[Case]:
        try:
            result = await self.db.execute(
                select(CaseDB).order_by(CaseDB.created_at.desc(), CaseDB.id.desc())
            )
            return [self._row_to_case(row) for row in result.scalars().all()]

        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list cases: {e}") from e

    async def update_case_status(self, case_id: int, status: CaseStatus) -> Optional[Case]:
        try:
            row = await self.db.get(CaseDB, case_id)
            if row is None:
                return None

            row.status = CaseStatus(status)
            await self.db.commit()
            return self._row_to_case(row)

        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to update status of case {case_id}: {e}") from e

    async def delete_case(self, case_id: int) -> bool:
        """Delete the insight and the case in one transaction."""
        try:
            await self.db.execute(delete(InsightDB).where(InsightDB.case_id == case_id))
            result = await self.db.execute(delete(CaseDB).where(CaseDB.id == case_id))
            await self.db.commit()

            return result.rowcount > 0

        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to delete case {case_id}: {e}") from e

    # ========================================================================
    # Insights
    # ========================================================================

    async def create_insight(self, case_id: int, data: InsightDraft) -> Insight:
        try:
            if await self.db.get(CaseDB, case_id) is None:
                raise StorageError(f"Cannot attach insight: case {case_id} does not exist")
            if await self._find_insight(case_id) is not None:
                raise DuplicateInsightError(case_id)

            row = InsightDB(
                case_id=case_id,
                summary=data.summary,
                blind_spots=list(data.blind_spots),
                questions=list(data.questions),
                original_language=data.original_language,
                created_at=datetime.now(timezone.utc),
            )
            self.db.add(row)
            await self.db.commit()
            return self._row_to_insight(row)

        except IntegrityError as e:
            # Lost a race with a concurrent insert for the same case
            await self.db.rollback()
            logger.warning(f"Insight insert for case {case_id} violated a constraint: {e}")
            raise DuplicateInsightError(case_id) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to create insight for case {case_id}: {e}") from e

    async def get_insight_by_case_id(self, case_id: int) -> Optional[Insight]:
        try:
            row = await self._find_insight(case_id)
            return self._row_to_insight(row) if row else None

        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get insight for case {case_id}: {e}") from e

    async def _find_insight(self, case_id: int) -> Optional[InsightDB]:
        result = await self.db.execute(select(InsightDB).where(InsightDB.case_id == case_id))
        return result.scalar_one_or_none()

    # ========================================================================
    # Row mapping
    # ========================================================================

    @staticmethod
    def _row_to_case(row: CaseDB) -> Case:
        return Case(
            id=row.id,
            title=row.title,
            patient_name=row.patient_name,
            patient_age=row.patient_age,
            clinical_notes=row.clinical_notes,
            transcript=row.transcript,
            audio_url=row.audio_url,
            status=CaseStatus(row.status),
            created_at=as_utc(row.created_at),
        )

    @staticmethod
    def _row_to_insight(row: InsightDB) -> Insight:
        return Insight(
            id=row.id,
            case_id=row.case_id,
            summary=row.summary,
            blind_spots=list(row.blind_spots or []),
            questions=list(row.questions or []),
            original_language=row.original_language,
            created_at=as_utc(row.created_at),
        )
