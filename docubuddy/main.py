"""
Docu Buddy - FastAPI Application Entry Point

Submit a GitHub repository, then browse and extend what was generated for
it: starter Q&A for developers and business readers, function
documentation proposals, chat, architecture docs and semantic search.

Usage:
    uvicorn docubuddy.main:app --reload

Or:
    python -m docubuddy.main
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from docubuddy.core.config import get_settings
from docubuddy.core.dependencies import get_store
from docubuddy.api.routes import (
    health_router,
    repositories_router,
    functions_router,
    qa_router,
    chat_router,
    search_router,
)
from docubuddy.api.middleware.error_handler import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: configure logging, create database tables
    - Shutdown: nothing to release; connections are per call
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")

    get_store()
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; generation endpoints will answer 503")

    yield  # Application runs here

    logger.info("Shutting down application...")


def create_app() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
## Docu Buddy API

AI-generated documentation for GitHub repositories.

### Features
- **Repository Analysis**: Metadata, starter questions and architecture docs
- **Dev / Business Views**: Every answer written for its audience
- **Function Docs**: Documentation, test and business-logic proposals
- **Chat**: Developer and business assistants, convertible into Q&A

### Quick Start
1. POST `/api/v1/repositories` with a `github_url`
2. Poll `/api/v1/repositories/{id}/status` until `completed`
3. Read `/api/v1/repositories/{id}/qa` or ask with `/api/v1/repositories/{id}/ask`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Register routers
    for router in (
        health_router,
        repositories_router,
        functions_router,
        qa_router,
        chat_router,
        search_router,
    ):
        app.include_router(router, prefix=settings.api_prefix)

    # Root endpoint
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": f"{settings.api_prefix}/health"
        }

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "docubuddy.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
