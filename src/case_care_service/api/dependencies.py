"""FastAPI dependencies shared by the routers.

Tests replace these through ``app.dependency_overrides``.
"""

from typing import AsyncIterator, Optional

from fastapi import Depends

from case_care_service.config import settings
from case_care_service.core import CaseAnalysisOrchestrator, CaseManager
from case_care_service.infrastructure.persistence import CaseRepository, repository_scope
from case_care_service.services import (
    GeminiClient,
    GenerativeModelClient,
    InsightGenerator,
    TranscriptionService,
)

# Process-wide handles, created on first use
_model_client: Optional[GenerativeModelClient] = None
_orchestrator: Optional[CaseAnalysisOrchestrator] = None


async def get_case_repository() -> AsyncIterator[CaseRepository]:
    """Dependency to get case repository.

    Returns the implementation selected by CASE_STORAGE_TYPE:
    - inmemory (default): InMemoryCaseRepository singleton for dev/testing
    - sql: SQLCaseRepository bound to a request-scoped session
    """
    async with repository_scope() as repository:
        yield repository


async def get_case_manager(
    repository: CaseRepository = Depends(get_case_repository),
) -> CaseManager:
    """Dependency to get case manager with repository."""
    return CaseManager(repository)


def get_model_client() -> GenerativeModelClient:
    """Dependency to get the shared generative model client."""
    global _model_client
    if _model_client is None:
        _model_client = GeminiClient.from_settings(settings)
    return _model_client


def get_analysis_orchestrator(
    model_client: GenerativeModelClient = Depends(get_model_client),
) -> CaseAnalysisOrchestrator:
    """Dependency to get the background analysis orchestrator.

    The orchestrator opens its own repository scopes; it never shares the
    request's session because it keeps running after the response is sent.
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = CaseAnalysisOrchestrator(
            generator=InsightGenerator(model_client),
            repository_scope=repository_scope,
            max_concurrent=settings.max_concurrent_analyses,
        )
    return _orchestrator


def get_transcription_service(
    model_client: GenerativeModelClient = Depends(get_model_client),
) -> TranscriptionService:
    """Dependency to get the transcription service."""
    return TranscriptionService(model_client, max_bytes=settings.max_upload_bytes)
