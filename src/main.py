"""
University Data Portal

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from src.config import get_settings
from src.database import close_db, init_db, ping_db, session_scope
from src.api.v1 import router as api_v1_router
from src.api.middleware.request_id import RequestIdMiddleware
from src.kernel.errors import StorageError, ValidationError, WorkflowError
from src.kernel.identity.role_directory import RoleDirectory
from src.schemas.common import HealthResponse
from src.logging_config import configure_logging, get_logger

settings = get_settings()
logger = get_logger(__name__)


async def bootstrap_admin() -> None:
    """Assign the configured bootstrap admin if it has no role row yet."""
    if not settings.bootstrap_admin_email:
        return
    async with session_scope() as session:
        await RoleDirectory(session).bootstrap_admin(settings.bootstrap_admin_email)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info(
        "Starting %s v%s (workflow profile: %s)",
        settings.project_name,
        settings.version,
        settings.workflow_profile,
    )
    await init_db()
    await bootstrap_admin()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    University Data Portal

    Centralizes research, partnership and ranking records behind a
    moderation workflow and exposes published records to BI pipelines.

    ## Workflow

    draft -> pending_review -> approved -> published, with rejection from
    pending_review and revert paths back to draft.

    ## Architectural Invariants

    1. Entry status changes only through the workflow engine
    2. Every transition is a conditional write on the expected prior status
    3. Role strings are interpreted only by the role directory
    4. Every mutation is recorded in the append-only event log
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# add_middleware stacks innermost-first: CORS is added last so it wraps everything
_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_headers(request: Request) -> dict:
    req_id = getattr(request.state, "request_id", None)
    return {"X-Request-ID": req_id} if req_id else {}


@app.exception_handler(WorkflowError)
async def workflow_exception_handler(request: Request, exc: WorkflowError):
    """Map workflow errors to their HTTP status; the entry is left unchanged."""
    content = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, ValidationError) and exc.field:
        content["field"] = exc.field
    if isinstance(exc, StorageError):
        logger.error("Storage failure: %s", exc.message, exc_info=exc.__cause__)
        content["detail"] = "Storage temporarily unavailable, try again later"
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=_error_headers(request),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Attach X-Request-ID to 4xx/5xx responses."""
    headers = {**(exc.headers or {}), **_error_headers(request)}
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Handle request validation errors."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })
    content = {"detail": "Validation error", "code": ValidationError.code, "errors": errors}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        content["request_id"] = req_id
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=content,
        headers=_error_headers(request),
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    req_id = getattr(request.state, "request_id", None)
    if settings.debug:
        content = {
            "detail": str(exc),
            "type": type(exc).__name__,
            "request_id": req_id,
        }
    else:
        content = {"detail": "Internal server error", "request_id": req_id}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=_error_headers(request),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    db_ok = await ping_db()
    return HealthResponse(
        status="ok" if db_ok else "degraded",
        version=settings.version,
        database="connected" if db_ok else "unavailable",
        workflow_profile=settings.workflow_profile,
    )


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs" if settings.debug else "disabled",
        "api": {
            "v1": settings.api_v1_prefix,
            "published": f"{settings.api_v1_prefix}/published",
        },
    }


app.include_router(
    api_v1_router,
    prefix=settings.api_v1_prefix,
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
