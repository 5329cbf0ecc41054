"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

import redis.asyncio as redis  # type: ignore[import-untyped]
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from fastapi_limiter import FastAPILimiter
from secure import Secure

from taskmanager.api import api_router
from taskmanager.core.config import Settings, get_settings
from taskmanager.core.errors import register_exception_handlers
from taskmanager.core.logging_setup import configure_logging
from taskmanager.db.session import Database
from taskmanager.integrations import build_object_store

logger = logging.getLogger(__name__)


async def _init_rate_limiter(settings: Settings):
    if not settings.redis_url:
        logger.info("REDIS_URL not set; rate limiting disabled")
        return None
    redis_pool = redis.from_url(
        settings.redis_url, encoding="utf-8", decode_responses=True
    )
    try:
        await FastAPILimiter.init(redis_pool)
    except Exception:  # pragma: no cover - limiter startup is best effort
        logger.exception("Failed to initialize rate limiter")
        await redis_pool.aclose()
        return None
    return redis_pool


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    database = Database(settings.database_url)
    await database.connect()
    if settings.database_create_all:
        await database.create_all()
    app.state.database = database
    app.state.object_store.ensure_root()
    redis_pool = await _init_rate_limiter(settings)
    try:
        yield
    finally:
        if redis_pool is not None:
            try:
                await FastAPILimiter.close()
            except Exception:  # pragma: no cover - limiter shutdown
                logger.exception("Failed to close rate limiter")
            finally:
                await redis_pool.aclose()
        await database.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; the database handle is attached at startup."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        redoc_url=None,
    )

    allowed_origins = [origin for origin in settings.cors_allowlist if origin]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(CorrelationIdMiddleware, header_name="X-Request-ID")

    secure_headers = Secure.with_default_headers()
    docs_prefixes = (app.docs_url or "", app.openapi_url or "")

    @app.middleware("http")
    async def _apply_security_headers(request, call_next):
        response = await call_next(request)
        # the default CSP blocks the CDN assets Swagger UI loads
        if not request.url.path.startswith(docs_prefixes):
            secure_headers.set_headers(response)
        return response

    register_exception_handlers(app)

    app.state.object_store = build_object_store()
    app.mount(
        settings.uploads_url_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )
    app.include_router(api_router)

    @app.get("/", include_in_schema=False, response_class=PlainTextResponse)
    async def root() -> str:
        return (
            f"{settings.app_name} is running. "
            f"Visit {settings.api_prefix}/docs for Swagger UI."
        )

    return app


app = create_app()
