"""Background case analysis.

Each created case gets exactly one analysis attempt, run detached from the
request that created it:

1. ``pending -> analyzing``
2. one call to the insight generator
3. insight stored, then ``analyzing -> completed``
4. any failure in 2 or while storing the insight: ``analyzing -> failed``

Nothing raised here reaches a client; the outcome is only visible through
the case status. Every status write goes through ``transition_case`` so an
illegal sequence is rejected instead of persisted.
"""

import asyncio
import logging
from typing import AsyncContextManager, Callable, Optional

from case_care_service.exceptions import (
    CaseServiceError,
    DuplicateInsightError,
    StorageError,
)
from case_care_service.infrastructure.persistence import CaseRepository
from case_care_service.models import Case, CaseStatus
from case_care_service.services import InsightGenerator

logger = logging.getLogger(__name__)

RepositoryScope = Callable[[], AsyncContextManager[CaseRepository]]


async def transition_case(
    repository: CaseRepository,
    case_id: int,
    target: CaseStatus,
) -> Optional[Case]:
    """Move a case to ``target`` if its lifecycle allows it.

    Returns:
        The updated case, or None if the case no longer exists

    Raises:
        InvalidStatusTransitionError: If the current status cannot reach ``target``
        StorageError: If the read or the write fails
    """
    case = await repository.get_case(case_id)
    if case is None:
        return None

    case.status.transition_to(target)
    updated = await repository.update_case_status(case_id, target)

    if updated is not None:
        logger.info(f"Case {case_id}: {case.status.value} -> {target.value}")
    return updated


class CaseAnalysisOrchestrator:
    """Runs detached analysis tasks, bounded by a concurrency limit."""

    def __init__(
        self,
        generator: InsightGenerator,
        repository_scope: RepositoryScope,
        max_concurrent: int = 4,
    ):
        """
        Args:
            generator: Insight generator wrapping the model client
            repository_scope: Factory for a repository unit of work; each step
                opens its own so no request-scoped session is reused
            max_concurrent: Upper bound on analyses calling the model at once
        """
        self.generator = generator
        self.repository_scope = repository_scope
        self._semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def run_analysis(self, case_id: int) -> Optional[CaseStatus]:
        """Analyse one case. Never raises.

        Returns:
            The terminal status reached, or None if the task stopped early
            (case deleted, storage failure, illegal transition)
        """
        async with self._semaphore:
            try:
                return await self._analyze(case_id)
            except Exception:
                logger.exception(f"Analysis task for case {case_id} aborted")
                return None

    async def _analyze(self, case_id: int) -> Optional[CaseStatus]:
        async with self.repository_scope() as repository:
            case = await transition_case(repository, case_id, CaseStatus.ANALYZING)
        if case is None:
            logger.warning(f"Case {case_id} no longer exists; analysis skipped")
            return None

        try:
            draft = await self.generator.generate(case)
        except Exception as e:
            logger.error(f"Analysis failed for case {case_id}: {e}")
            return await self._mark_failed(case_id)

        async with self.repository_scope() as repository:
            if await repository.get_case(case_id) is None:
                logger.warning(f"Case {case_id} was deleted during analysis; insight discarded")
                return None

            try:
                await repository.create_insight(case_id, draft)
            except DuplicateInsightError:
                logger.error(f"Case {case_id} already has an insight; leaving status unchanged")
                return None
            except StorageError as e:
                logger.error(f"Could not store insight for case {case_id}: {e}")
                insight_stored = False
            else:
                insight_stored = True

            if insight_stored:
                # A failure here leaves the case in analyzing, never failed-with-insight
                completed = await transition_case(repository, case_id, CaseStatus.COMPLETED)
                if completed is None:
                    logger.warning(f"Case {case_id} was deleted before completion")
                    return None
                return CaseStatus.COMPLETED

        return await self._mark_failed(case_id)

    async def _mark_failed(self, case_id: int) -> Optional[CaseStatus]:
        try:
            async with self.repository_scope() as repository:
                case = await transition_case(repository, case_id, CaseStatus.FAILED)
        except CaseServiceError as e:
            logger.error(f"Could not mark case {case_id} as failed: {e}")
            return None

        if case is None:
            logger.warning(f"Case {case_id} was deleted before it could be marked failed")
            return None
        return CaseStatus.FAILED
