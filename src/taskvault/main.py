"""FastAPI application factory.

create_app() returns a configured FastAPI instance. Lifespan manages
startup/shutdown (Redis pool, database engine). Middleware, CORS, and
routers are all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskvault import __version__
from taskvault.api import api_router
from taskvault.cache import close_redis, init_redis
from taskvault.config import settings
from taskvault.db.engine import engine
from taskvault.middleware.rate_limit import RateLimitMiddleware
from taskvault.middleware.request_id import RequestIdMiddleware
from taskvault.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "taskvault.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        await init_redis()
        logger.info("taskvault.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis only backs rate limiting; run without it
        logger.warning("taskvault.redis_unavailable", error=str(e))

    yield

    logger.info("taskvault.shutdown")
    await close_redis()
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="TaskVault",
        description="Per-user task lists behind credential-based authentication",
        version=__version__,
        lifespan=lifespan,
    )

    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → RateLimit → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)
    return app


# Default app instance (used by uvicorn: taskvault.main:app)
app = create_app()
