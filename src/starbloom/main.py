"""FastAPI application factory.

App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (database engine).
Logging, middleware, exception handlers, and routers all registered here.
"""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from starbloom import __version__
from starbloom.api import api_router
from starbloom.api.errors import register_exception_handlers
from starbloom.config import settings
from starbloom.db.engine import async_session_factory, engine

logger = structlog.get_logger()


def configure_logging() -> None:
    """structlog with request contextvars; JSON lines outside development."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.environment == "development":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if settings.debug else logging.INFO
        ),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "starbloom.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("starbloom.shutdown")
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Starbloom",
        description="Social networking API — posts, comments, likes, and follows",
        version=__version__,
        lifespan=lifespan,
    )

    # The authenticate middleware opens its own short session per request.
    app.state.session_factory = async_session_factory

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: Recover → RequestLog → CORS → Authenticate → handler
    # (authorization happens per handler via require_authenticated)

    from starbloom.middleware.authenticate import AuthenticateMiddleware
    from starbloom.middleware.recover import RecoverMiddleware
    from starbloom.middleware.request_log import RequestLogMiddleware

    app.add_middleware(AuthenticateMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(RecoverMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: starbloom.main:app)
app = create_app()
