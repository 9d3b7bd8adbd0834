import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import (
    DatabaseError,
    DBAPIError,
    IntegrityError,
    OperationalError,
)
from sqlalchemy.exc import (
    TimeoutError as SQLAlchemyTimeoutError,
)

from movie_explorer.api import favorites, movies, recommendations
from movie_explorer.db.connection import (
    create_sqlite_schema,
    dispose_engine,
    get_database_type,
    get_database_url,
    get_engine,
)
from movie_explorer.errors import UpstreamError
from movie_explorer.schemas.error import ErrorType, ValidationErrorDetail
from movie_explorer.settings import get_settings
from movie_explorer.utils.error_responses import (
    build_error_response,
    build_validation_error_response,
    error_json_response,
)
from movie_explorer.utils.request_context import get_request_id, set_request_id

settings = get_settings()

logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def validate_environment() -> None:
    """Log a warning block for every optional setting left unset."""

    warnings = get_settings().optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning("  • %s", warning)
        logger.warning("=" * 60)


def _sanitize_database_url(url: str) -> str:
    """Hide the password portion of ``url`` for logging."""

    if "://" not in url:
        return url
    scheme, rest = url.split("://", 1)
    if "@" not in rest:
        return url
    auth, host_db = rest.split("@", 1)
    if ":" in auth:
        user, _ = auth.split(":", 1)
        return f"{scheme}://{user}:***@{host_db}"
    return f"{scheme}://{auth}@{host_db}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    validate_environment()

    db_type = get_database_type()
    logger.info("=" * 60)
    logger.info("Movie Explorer API - Database Preflight Check")
    logger.info("=" * 60)
    logger.info("Database Type: %s", db_type.upper())
    logger.info("Database URL: %s", _sanitize_database_url(get_database_url()))

    if db_type == "sqlite":
        logger.info("SQLite mode - creating tables for local development")
        await create_sqlite_schema(get_engine())
    else:
        logger.info("PostgreSQL mode - using Alembic migrations")
        logger.info("Ensure migrations are up to date (run: alembic upgrade head)")
    logger.info("=" * 60)

    from movie_explorer.warmup import warmup_all

    await warmup_all(resolve_db_type=get_database_type, resolve_engine=get_engine)

    yield

    from movie_explorer.cache import close_redis
    from movie_explorer.clients.omdb_client import close_http_client

    logger.info("Shutting down Movie Explorer API")
    await close_http_client()
    await close_redis()
    await dispose_engine()


app = FastAPI(
    title="Movie Explorer API",
    version="0.1.0",
    description="Movie search with per-user favorites and AI recommendations.",
    lifespan=lifespan,
    redirect_slashes=False,
)


def _default_origins() -> list[str]:
    ports = list(range(3000, 3011)) + [5173]
    origins = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend(f"http://{host}:{port}" for port in ports)
    return origins


def _combine_origins(*origin_groups: list[str]) -> list[str]:
    seen: set[str] = set()
    combined: list[str] = []
    for group in origin_groups:
        for origin in group:
            normalized = origin.rstrip("/")
            if normalized and normalized not in seen:
                seen.add(normalized)
                combined.append(normalized)
    return combined


allow_origins = _combine_origins(_default_origins(), settings.cors_allow_origins)
cors_origin_regex = settings.cors_allow_origin_regex or None

logger.info("Configured CORS allow_origins: %s", ", ".join(allow_origins))
if cors_origin_regex:
    logger.info("Configured CORS allow_origin_regex: %s", cors_origin_regex)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_origin_regex=cors_origin_regex,
    expose_headers=[REQUEST_ID_HEADER],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Tag the request with an id, reusing the caller's when supplied."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    return error_json_response(
        build_validation_error_response(
            message="Request validation failed",
            detail=f"{len(errors)} validation error(s)",
            status_code=status.HTTP_400_BAD_REQUEST,
            path=str(request.url.path),
            errors=errors,
        )
    )


@app.exception_handler(UpstreamError)
async def upstream_exception_handler(request: Request, exc: UpstreamError):
    """A provider (or the favorites store during enrichment) failed."""
    logger.error(
        "Upstream %s failure for request %s to %s: %s",
        exc.provider,
        get_request_id(),
        request.url.path,
        exc,
    )

    return error_json_response(
        build_error_response(
            error_type=ErrorType.UPSTREAM_ERROR,
            message="Upstream service request failed",
            detail=f"{exc.provider}: {exc}",
            status_code=status.HTTP_502_BAD_GATEWAY,
            path=str(request.url.path),
        )
    )


@app.exception_handler(OperationalError)
@app.exception_handler(DBAPIError)
async def database_connection_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Database connection error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )

    return error_json_response(
        build_error_response(
            error_type=ErrorType.DATABASE_ERROR,
            message="Database connection failed",
            detail="Unable to connect to the database. Please try again later.",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            path=str(request.url.path),
            retry_after=5,
        )
    )


@app.exception_handler(SQLAlchemyTimeoutError)
async def database_timeout_exception_handler(
    request: Request, exc: SQLAlchemyTimeoutError
):
    logger.error(
        "Database timeout error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )

    return error_json_response(
        build_error_response(
            error_type=ErrorType.TIMEOUT_ERROR,
            message="Database query timeout",
            detail="The database query took too long to complete. Please try again.",
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            path=str(request.url.path),
            retry_after=3,
        )
    )


@app.exception_handler(IntegrityError)
async def database_integrity_exception_handler(request: Request, exc: IntegrityError):
    logger.error(
        "Database integrity error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )

    return error_json_response(
        build_error_response(
            error_type=ErrorType.CONFLICT,
            message="Data integrity constraint violation",
            detail="The operation would violate a database constraint.",
            status_code=status.HTTP_409_CONFLICT,
            path=str(request.url.path),
        )
    )


@app.exception_handler(DatabaseError)
async def database_generic_exception_handler(request: Request, exc: DatabaseError):
    logger.error(
        "Database error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )

    return error_json_response(
        build_error_response(
            error_type=ErrorType.DATABASE_ERROR,
            message="Database operation failed",
            detail="An error occurred while accessing the database. Please try again.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            path=str(request.url.path),
            retry_after=3,
        )
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )

    return error_json_response(
        build_error_response(
            error_type=ErrorType.INTERNAL_ERROR,
            message="Internal server error",
            detail=f"An unexpected error occurred: {type(exc).__name__}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            path=str(request.url.path),
        )
    )


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
app.include_router(movies.router, prefix="/movies", tags=["movies"])
app.include_router(
    recommendations.router, prefix="/recommendations", tags=["recommendations"]
)
