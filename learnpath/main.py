"""
LearnPath API

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnpath.api.deps import get_request_id
from learnpath.api.middleware.rate_limit import RateLimitMiddleware
from learnpath.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from learnpath.api.v1 import router as api_v1_router
from learnpath.config import get_settings
from learnpath.database import close_db, init_db
from learnpath.kernel.exceptions import InvalidPayload, LearnPathError
from learnpath.logging_config import configure_logging, get_logger
from learnpath.schemas.common import ErrorResponse, HealthResponse, flatten_errors

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Configure logging, create tables on startup, dispose the engine on shutdown."""
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    if not settings.admin_key:
        logger.warning("ADMIN_KEY is not set; catalog authoring endpoints will refuse all calls")
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    LearnPath API

    Ordered learning tracks authored by a content agent, and anonymous
    learners progressing through them by submitting attempts.

    ## Catalog authoring (X-ADMIN-KEY)

    - **ensure-track**: create a track or merge only the fields sent
    - **seed-lessons**: upsert a track's lessons by position, all or nothing

    ## Learners

    - **lessons/next**: the lesson at the learner's cursor
    - **attempts**: record an attempt; 70% or more advances the cursor
    """,
    version=settings.version,
    lifespan=lifespan,
)


# add_middleware stacks innermost-first: the last one added is outermost.
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _with_request_id(request: Request, content: dict) -> tuple[dict, dict]:
    headers = {}
    req_id = get_request_id(request)
    if req_id:
        headers[REQUEST_ID_HEADER] = req_id
        content["request_id"] = req_id
    return content, headers


@app.exception_handler(LearnPathError)
async def core_error_handler(request: Request, exc: LearnPathError):
    """Map core errors to their HTTP status. Nothing in the core is fatal."""
    errors = exc.errors if isinstance(exc, InvalidPayload) and exc.errors else None
    content = ErrorResponse(detail=exc.message, code=exc.code, errors=errors).model_dump(exclude_none=True)
    logger.info("Request failed", extra={"code": exc.code, "path": request.url.path})
    content, headers = _with_request_id(request, content)
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """401/404/500 from dependencies and routing, with the request id attached."""
    content, headers = _with_request_id(request, {"detail": exc.detail})
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Schema violations in bodies or query parameters are invalid payloads (400)."""
    content, headers = _with_request_id(
        request,
        {
            "detail": "Validation error",
            "code": InvalidPayload.code,
            "errors": flatten_errors(exc.errors()),
        },
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=content,
        headers=headers,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Unexpected errors: log with traceback, answer 500 without internals."""
    logger.exception("Unhandled exception: %s", type(exc).__name__)
    detail = str(exc) if settings.debug else "Internal server error"
    content, headers = _with_request_id(request, {"detail": detail})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=headers,
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(status="ok", version=settings.version)


app.include_router(api_v1_router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "learnpath.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
