"""Case API routes."""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status

from case_care_service.api.dependencies import get_analysis_orchestrator, get_case_manager
from case_care_service.config import settings
from case_care_service.core import CaseAnalysisOrchestrator, CaseManager
from case_care_service.exceptions import NotFoundError
from case_care_service.models import (
    CaseCreateRequest,
    CaseDetailResponse,
    CaseResponse,
    ErrorResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cases", tags=["cases"])


# =============================================================================
# Core CRUD Endpoints
# =============================================================================

@router.get(
    "",
    response_model=List[CaseResponse],
    summary="List cases",
    description="""
Returns every case, newest first. No pagination.

**Response Example**:
```json
[
  {
    "id": 2,
    "title": "Fever",
    "patientName": "Jane Roe",
    "patientAge": 30,
    "clinicalNotes": "Temp 101F",
    "transcript": "I feel hot and tired",
    "audioUrl": null,
    "status": "pending",
    "createdAt": "2026-10-19T10:30:00Z"
  }
]
```
    """,
    responses={
        200: {"description": "List of cases returned successfully"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
    },
)
async def list_cases(
    case_manager: CaseManager = Depends(get_case_manager),
):
    """List all cases."""
    cases = await case_manager.list_cases()
    return [CaseResponse.from_case(case) for case in cases]


@router.get(
    "/{case_id}",
    response_model=CaseDetailResponse,
    summary="Get case by ID",
    description="""
Retrieves one case with its insight (`null` until analysis completes).

**Polling**: while `status` is `pending` or `analyzing` the response carries a
`Retry-After` header with the recommended polling interval in seconds.
Stop polling once `status` is `completed` or `failed`.

**Response Example**:
```json
{
  "id": 1,
  "title": "Chest Pain - 45M",
  "patientName": "John Doe",
  "status": "completed",
  "insight": {
    "id": 1,
    "caseId": 1,
    "summary": "45-year-old with exertional chest pressure...",
    "blindSpots": ["Anchoring on a normal resting ECG"],
    "questions": ["Does the pain radiate to the jaw?"],
    "originalLanguage": "English"
  }
}
```
    """,
    responses={
        200: {"description": "Case found and returned successfully"},
        400: {"model": ErrorResponse, "description": "Case id is not an integer"},
        404: {"model": ErrorResponse, "description": "Case not found"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
    },
)
async def get_case(
    case_id: int,
    response: Response,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Get a case by ID."""
    case = await case_manager.get_case(case_id)

    if not case:
        raise NotFoundError(f"Case {case_id} not found")

    if not case.status.is_terminal:
        response.headers["Retry-After"] = str(settings.poll_interval_seconds)

    return CaseDetailResponse.from_case_with_insight(case)


@router.post(
    "",
    response_model=CaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create case and start analysis",
    description="""
Creates a case in `pending` status and returns it immediately.

Analysis runs after the response is sent: the case moves to `analyzing`, then
to `completed` (with an insight) or `failed`. Poll `GET /api/cases/{id}` to
observe the outcome.

**Request Body Example**:
```json
{
  "title": "Fever",
  "patientName": "Jane Roe",
  "patientAge": 30,
  "clinicalNotes": "Temp 101F",
  "transcript": "I feel hot and tired"
}
```

**Validation**:
- `title` and `patientName` are required, non-empty
- `patientAge` is coerced to a non-negative integer when present
- `status` and unknown fields are ignored
    """,
    responses={
        201: {"description": "Case created; analysis scheduled"},
        400: {"model": ErrorResponse, "description": "Invalid request data (message + field)"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
    },
)
async def create_case(
    request: CaseCreateRequest,
    background_tasks: BackgroundTasks,
    case_manager: CaseManager = Depends(get_case_manager),
    orchestrator: CaseAnalysisOrchestrator = Depends(get_analysis_orchestrator),
):
    """Create a new case and schedule its analysis."""
    case = await case_manager.create_case(request)

    # Runs after the response is sent; outcome is observed through the case status
    background_tasks.add_task(orchestrator.run_analysis, case.id)

    return CaseResponse.from_case(case)


@router.delete(
    "/{case_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete case permanently",
    description="""
Permanently deletes a case and its insight.

An analysis still in flight for the case will not write an insight once the
case is gone.
    """,
    responses={
        204: {"description": "Case deleted successfully (no content returned)"},
        404: {"model": ErrorResponse, "description": "Case not found"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
    },
)
async def delete_case(
    case_id: int,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Delete a case."""
    deleted = await case_manager.delete_case(case_id)

    if not deleted:
        raise NotFoundError(f"Case {case_id} not found")

    return Response(status_code=status.HTTP_204_NO_CONTENT)
