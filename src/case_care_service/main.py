"""Main FastAPI application for case-care-service."""

import asyncio
import contextlib
import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from case_care_service import __version__
from case_care_service.api.dependencies import get_analysis_orchestrator, get_model_client
from case_care_service.api.errors import register_exception_handlers
from case_care_service.api.routes.cases import router as cases_router
from case_care_service.api.routes.transcribe import router as transcribe_router
from case_care_service.config import settings
from case_care_service.core import seed_demo_case
from case_care_service.infrastructure.database import get_db_client
from case_care_service.infrastructure.persistence import repository_scope
from case_care_service.models import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Case Care Service",
    description="Clinical case intake with background AI insight generation",
    version=__version__,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(cases_router)
app.include_router(transcribe_router)


@app.on_event("startup")
async def startup():
    """Initialize storage and optional demo data on startup."""
    logger.info(f"Starting {settings.service_name} on port {settings.port}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Case storage: {settings.case_storage_type}")

    if settings.uses_sql_storage:
        db_client = get_db_client()
        try:
            await db_client.verify_connection()

            # Alembic migrations are the primary path; create_tables() covers local setups
            await db_client.create_tables()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    if settings.seed_demo_case:
        async with repository_scope() as repository:
            case = await seed_demo_case(repository)
        if case is not None:
            orchestrator = get_analysis_orchestrator(get_model_client())
            # Keep a reference so the task is not garbage collected mid-run
            app.state.seed_analysis_task = asyncio.create_task(
                orchestrator.run_analysis(case.id)
            )


@app.on_event("shutdown")
async def shutdown():
    """Clean up resources on shutdown."""
    logger.info("Shutting down service")

    seed_task = getattr(app.state, "seed_analysis_task", None)
    if seed_task is not None and not seed_task.done():
        seed_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await seed_task
        logger.info("Cancelled pending demo case analysis")
    app.state.seed_analysis_task = None

    if settings.uses_sql_storage:
        await get_db_client().close()


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="""
Returns the health status of the Case Care Service.

**Response Example**:
```json
{
  "status": "healthy",
  "service": "case-care-service",
  "version": "1.0.0",
  "database": "sqlite+aiosqlite"
}
```

**Storage**: No database query (reports storage type only)
    """,
    responses={
        200: {"description": "Service is healthy and operational"},
    },
)
async def health_check():
    """Health check endpoint."""
    database = (
        settings.database_url.split("://")[0] if settings.uses_sql_storage else "inmemory"
    )
    return HealthResponse(
        status="healthy",
        service=settings.service_name,
        version=__version__,
        database=database,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "case_care_service.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.environment == "development",
    )
