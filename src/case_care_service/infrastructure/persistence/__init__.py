"""Case persistence layer - Repository Pattern implementation."""

from case_care_service.infrastructure.persistence.case_repository import (
    CaseRepository,
    InMemoryCaseRepository,
)
from case_care_service.infrastructure.persistence.factory import (
    get_inmemory_repository,
    repository_scope,
)
from case_care_service.infrastructure.persistence.sql_case_repository import (
    SQLCaseRepository,
)

__all__ = [
    "CaseRepository",
    "InMemoryCaseRepository",
    "SQLCaseRepository",
    "get_inmemory_repository",
    "repository_scope",
]
