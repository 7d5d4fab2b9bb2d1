"""Case business logic manager - Repository Pattern."""

import logging
from typing import List, Optional

from case_care_service.infrastructure.persistence import CaseRepository
from case_care_service.models import (
    Case,
    CaseCreateRequest,
    CaseWithInsight,
)

logger = logging.getLogger(__name__)


class CaseManager:
    """Business logic for case management operations.

    This class implements the service layer using the Repository pattern.
    It handles request-path logic while delegating persistence to CaseRepository;
    analysis runs separately in CaseAnalysisOrchestrator.
    """

    def __init__(self, repository: CaseRepository):
        """Initialize case manager with repository.

        Args:
            repository: CaseRepository implementation (InMemory or SQL)
        """
        self.repository = repository

    async def create_case(self, request: CaseCreateRequest) -> Case:
        """Create a new case in ``pending`` status.

        Args:
            request: Validated case creation request

        Returns:
            Created case with generated ID
        """
        case = await self.repository.create_case(request.to_new_case())

        logger.info(f"Created case {case.id} ({case.title!r}) with status {case.status.value}")

        return case

    async def get_case(self, case_id: int) -> Optional[CaseWithInsight]:
        """Get a case with its insight.

        Returns:
            Case if found, None otherwise
        """
        return await self.repository.get_case(case_id)

    async def list_cases(self) -> List[Case]:
        """List every case, newest first."""
        return await self.repository.list_cases()

    async def delete_case(self, case_id: int) -> bool:
        """Delete a case and its insight.

        Returns:
            True if deleted, False if not found
        """
        deleted = await self.repository.delete_case(case_id)

        if deleted:
            logger.info(f"Deleted case {case_id}")

        return deleted
