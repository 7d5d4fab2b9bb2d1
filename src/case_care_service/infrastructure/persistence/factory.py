"""Repository selection based on ``case_storage_type``."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from case_care_service.config import settings
from case_care_service.infrastructure.database import get_db_client
from case_care_service.infrastructure.persistence.case_repository import (
    CaseRepository,
    InMemoryCaseRepository,
)
from case_care_service.infrastructure.persistence.sql_case_repository import SQLCaseRepository


# Global singleton in-memory repository (persists across requests)
_inmemory_repository: Optional[InMemoryCaseRepository] = None


def get_inmemory_repository() -> InMemoryCaseRepository:
    global _inmemory_repository
    if _inmemory_repository is None:
        _inmemory_repository = InMemoryCaseRepository()
    return _inmemory_repository


@asynccontextmanager
async def repository_scope() -> AsyncIterator[CaseRepository]:
    """Yield a repository bound to its own unit of work.

    - inmemory (default): the InMemoryCaseRepository singleton
    - sql: SQLCaseRepository over a fresh session, closed on exit
    """
    if settings.uses_sql_storage:
        async with get_db_client().session_scope() as session:
            yield SQLCaseRepository(session)
    else:
        yield get_inmemory_repository()
