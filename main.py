import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Ensure all SQLAlchemy models are registered with Base.metadata
# Required before create_tables() or any ORM operations
import polylingo.models  # noqa: F401
from polylingo.api.v1.endpoints.library_router import router as library_router
from polylingo.api.v1.endpoints.translation_router import router as translation_router
from polylingo.api.v1.endpoints.usage_router import router as usage_router
from polylingo.core.config import settings
from polylingo.core.constants import CORS_ALLOWED_ORIGINS_DEV
from polylingo.core.database import create_tables
from polylingo.core.exceptions import (
    DomainException,
    ForbiddenException,
    InvalidOperationException,
    NotFoundException,
    QuotaExceededException,
    RateLimitExceededException,
    TranslationUnavailableException,
    UnauthorizedException,
    ValidationException,
)
from polylingo.core.redis_client import close_redis_client, create_redis_client
from polylingo.interfaces.usage_gate import UsageGateError
from polylingo.schemas.common_schemas import HealthResponse
from polylingo.services.service_dependencies import (
    create_glossary,
    create_translation_service,
    create_translator,
)

# Configure structlog
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan event handler for startup and shutdown.
    """
    logger.info("fastapi_starting")

    await create_tables()
    logger.info("database_tables_created")

    await create_redis_client()
    logger.info("redis_client_initialized")

    http_client = httpx.AsyncClient(timeout=settings.provider_request_timeout_seconds)
    translator = create_translator(http_client)
    app.state.http_client = http_client
    app.state.translator = translator
    app.state.translation_service = create_translation_service(translator, create_glossary(http_client))
    logger.info("translation_service_initialized", provider=settings.translation_provider)

    yield

    await app.state.translation_service.shutdown()
    await http_client.aclose()
    await close_redis_client()
    logger.info("fastapi_shutdown_complete")


app = FastAPI(
    title=settings.app_name,
    description="Multi-target translation with caching, retries and daily quotas",
    docs_url="/docs",
    lifespan=lifespan,
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS_DEV,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Exception Handlers (Convert Domain Exceptions -> HTTP Responses)
# ============================================================================


def _error_response(status_code: int, detail: str, error_code: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "error_code": error_code,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **extra,
        },
    )


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException) -> JSONResponse:
    """Handle resource not found exceptions."""
    return _error_response(status.HTTP_404_NOT_FOUND, exc.message, exc.error_code)


@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException) -> JSONResponse:
    """Handle API key exceptions."""
    return _error_response(status.HTTP_401_UNAUTHORIZED, exc.message, exc.error_code)


@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException) -> JSONResponse:
    """Handle authorization exceptions."""
    return _error_response(status.HTTP_403_FORBIDDEN, exc.message, exc.error_code)


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    """Handle validation exceptions."""
    return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.error_code)


@app.exception_handler(InvalidOperationException)
async def invalid_operation_exception_handler(request: Request, exc: InvalidOperationException) -> JSONResponse:
    """Handle state conflicts: retry not allowed, batch closed."""
    return _error_response(status.HTTP_409_CONFLICT, exc.message, exc.error_code)


@app.exception_handler(QuotaExceededException)
async def quota_exceeded_exception_handler(request: Request, exc: QuotaExceededException) -> JSONResponse:
    """Handle daily quota exhaustion."""
    return _error_response(status.HTTP_429_TOO_MANY_REQUESTS, exc.message, exc.error_code, remaining=exc.remaining)


@app.exception_handler(RateLimitExceededException)
async def rate_limit_exception_handler(request: Request, exc: RateLimitExceededException) -> JSONResponse:
    """Handle per-IP rate limiting."""
    return _error_response(status.HTTP_429_TOO_MANY_REQUESTS, exc.message, exc.error_code)


@app.exception_handler(TranslationUnavailableException)
async def translation_unavailable_exception_handler(
    request: Request, exc: TranslationUnavailableException
) -> JSONResponse:
    """Handle failed single-shot translations."""
    status_code = status.HTTP_504_GATEWAY_TIMEOUT if exc.timed_out else status.HTTP_502_BAD_GATEWAY
    return _error_response(status_code, exc.message, exc.error_code)


@app.exception_handler(UsageGateError)
async def usage_gate_error_handler(request: Request, exc: UsageGateError) -> JSONResponse:
    """Quota store unreachable."""
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc), "USAGE_UNAVAILABLE")


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Fallback handler for all other domain exceptions."""
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message, exc.error_code)


# ============================================================================
# Router Registration
# ============================================================================

API_V1_PREFIX = "/api/v1"

app.include_router(translation_router, prefix=API_V1_PREFIX)
app.include_router(library_router, prefix=API_V1_PREFIX)
app.include_router(usage_router, prefix=API_V1_PREFIX)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="healthy")


@app.get("/health/providers")
async def providers_health_check(request: Request):
    """Translation provider availability."""
    translator = getattr(request.app.state, "translator", None)
    available = await translator.check_availability() if translator is not None else False
    return {
        "status": "healthy" if available else "degraded",
        "provider": settings.translation_provider,
        "translator_available": available,
    }


if __name__ == "__main__":
    print("API Documentation: http://localhost:8000/docs")

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
