from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from astrochat.app.api import chat_router, health_router, user_status_router
from astrochat.app.api.health import SERVICE_NAME, SERVICE_VERSION
from astrochat.app.core.clock import Clock
from astrochat.app.core.config import Settings, settings as default_settings
from astrochat.app.core.http_client import init_http_client
from astrochat.app.core.logging import get_logger, setup_logging
from astrochat.app.db.database import Database
from astrochat.app.exceptions import AstroChatException, DailyLimitExceededError
from astrochat.app.middleware.rate_limit import RateLimitMiddleware, RateLimitRule
from astrochat.app.middleware.request_id import RequestIdMiddleware, get_request_id
from astrochat.app.middleware.request_size import RequestSizeLimitMiddleware
from astrochat.app.middleware.security_headers import SecurityHeadersMiddleware
from astrochat.app.providers.base import BaseProvider
from astrochat.app.providers.factory import create_provider
from astrochat.app.services.quota_tracker import QuotaTracker, SQLQuotaStore

NOT_FOUND_MESSAGE = "Endpoint not found in this cosmic realm"


def build_rate_limit_rules(config: Settings) -> list[RateLimitRule]:
    return [
        RateLimitRule(
            path_prefix="/api/chat",
            max_requests=config.chat_rate_limit_requests,
            window_seconds=config.chat_rate_limit_window_seconds,
            message="Too many requests from this IP, please try again later.",
        ),
        RateLimitRule(
            path_prefix="/api/user-status",
            max_requests=config.status_rate_limit_requests,
            window_seconds=config.status_rate_limit_window_seconds,
            message="Too many status requests, please try again later.",
        ),
    ]


def create_app(
    config: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    tracker: Optional[QuotaTracker] = None,
    provider: Optional[BaseProvider] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Components left as None are built from `config` on startup. Tests pass
    their own tracker, provider or clock.

    Returns:
        Configured FastAPI application instance
    """
    config = config or default_settings
    setup_logging(config)
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Build the database handle, HTTP pool, provider and tracker.

        Startup requires a reachable database so the schema can be created.
        Outages after startup are handled per request by the tracker policy.
        """
        async with init_http_client(config) as http_client:
            active_database = database
            owns_database = False
            active_tracker = tracker

            if active_tracker is None:
                if active_database is None:
                    active_database = Database(config.database_url, config)
                    owns_database = True
                if not await active_database.verify_connection():
                    logger.error("Database connection failed!")
                    if owns_database:
                        await active_database.dispose()
                    raise RuntimeError("Cannot connect to database")
                await active_database.create_all()
                active_tracker = QuotaTracker(
                    SQLQuotaStore(active_database),
                    clock=clock,
                    daily_limit=config.daily_question_limit,
                    max_retries=config.quota_max_retries,
                    status_fallback_on_unavailable=config.status_fallback_on_unavailable,
                )

            app.state.database = active_database
            app.state.tracker = active_tracker
            app.state.provider = provider or create_provider(config, http_client)

            logger.info(
                "Application startup complete",
                extra={
                    "provider": app.state.provider.name,
                    "daily_limit": active_tracker.daily_limit,
                    "environment": config.environment,
                },
            )

            try:
                yield
            finally:
                if owns_database:
                    await active_database.dispose()

        logger.info("Application shutdown complete")

    app = FastAPI(
        title=SERVICE_NAME,
        description="Vedic astrology chat backend with a per-person daily question quota",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = config

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(RateLimitMiddleware, rules=build_rate_limit_rules(config))
    app.add_middleware(RequestSizeLimitMiddleware, max_body_size=config.max_body_size)
    app.add_middleware(SecurityHeadersMiddleware, hsts=config.is_production)
    # CORS (handles preflight requests before the limiters)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
        max_age=600,
    )
    # Request ID (outermost, so rate limit and size rejections carry it too)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(health_router)
    app.include_router(chat_router)
    app.include_router(user_status_router)

    @app.exception_handler(DailyLimitExceededError)
    async def daily_limit_handler(request: Request, exc: DailyLimitExceededError) -> JSONResponse:
        """Return HTTP 429 with the counters and the reset message."""
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(AstroChatException)
    async def astrochat_exception_handler(request: Request, exc: AstroChatException) -> JSONResponse:
        """Render application errors as `{"error": code, "message": ...}`."""
        if exc.status_code >= 500:
            logger.warning(
                f"{type(exc).__name__}: {exc.message}",
                extra={"request_id": get_request_id(request), "path": request.url.path},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error_code, "message": exc.message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"error": NOT_FOUND_MESSAGE})
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled exceptions.

        The traceback goes to the server log only. Debug mode adds the
        exception type and message, never the stack trace.
        """
        request_id = get_request_id(request)
        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra={"request_id": request_id, "path": request.url.path},
        )

        content = {
            "error": "internal_error",
            "message": "Something went wrong. The stars are realigning, please try again.",
            "request_id": request_id,
        }
        if config.debug:
            content["message"] = str(exc)
            content["exception_type"] = type(exc).__name__
        return JSONResponse(status_code=500, content=content)

    return app


# Create the application instance
app = create_app()
