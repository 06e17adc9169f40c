"""FastAPI application entry point."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from meetnotes.api.errors import register_exception_handlers
from meetnotes.api.health import router as health_router
from meetnotes.api.v1.router import router as api_router
from meetnotes.config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    from meetnotes.infrastructure.database import engine
    from meetnotes.scheduler.jobs import get_scheduler

    logger.info("Starting Meeting Notes Summarizer API...")
    logger.info(f"Environment: {settings.environment}")

    scheduler = get_scheduler()
    scheduler.start()

    yield

    scheduler.shutdown()
    await engine.dispose()
    logger.info("Shutting down Meeting Notes Summarizer API...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    docs_kwargs = {}
    if settings.is_production:
        docs_kwargs = {"docs_url": None, "redoc_url": None, "openapi_url": None}

    app = FastAPI(
        title="Meeting Notes Summarizer",
        description="AI-powered meeting notes summarizer & sharer",
        version=VERSION,
        lifespan=lifespan,
        **docs_kwargs,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(dict.fromkeys([
            settings.web_origin,
            "http://localhost:3000",
            "http://localhost:3001",
        ])),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        client = request.client.host if request.client else "-"
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"{response.status_code} {duration_ms:.1f}ms ({client})"
        )
        return response

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(api_router)

    @app.get("/")
    async def root() -> dict:
        """Service description and endpoint index."""
        return {
            "name": "Meeting Notes Summarizer API",
            "version": VERSION,
            "description": "AI-powered meeting notes summarizer & sharer",
            "endpoints": {
                "health": "/health",
                "summaries": "/api/summaries",
            },
        }

    return app


# Create app instance
app = create_app()


def run() -> None:
    """Serve the app with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run(
        "meetnotes.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
