"""
Error Handler Middleware - Global exception handling for the API.

The exception classes in this module are raised by services and agents
as well as routes; the handlers turn them into consistent JSON errors.
"""

import logging
import traceback
from datetime import datetime, timezone

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from docubuddy.core.config import get_settings

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: dict = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidRepositoryURLError(AppException):
    """Raised when a submitted URL is not a GitHub repository URL."""

    def __init__(self, github_url: str):
        super().__init__(
            message="Please enter a valid GitHub repository URL",
            error_code="INVALID_REPO_URL",
            status_code=400,
            details={"github_url": github_url}
        )


class RepositoryNotFoundError(AppException):
    """Raised when GitHub or the store has no such repository."""

    def __init__(self, repo: str):
        super().__init__(
            message="Repository not found",
            error_code="REPO_NOT_FOUND",
            status_code=404,
            details={"repository": repo}
        )


class RecordNotFoundError(AppException):
    """Raised when a stored row (function, Q&A, conversation, ...) or a repository file is missing."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(
            message=f"{kind} not found: {record_id}",
            error_code="NOT_FOUND",
            status_code=404,
            details={"kind": kind, "id": record_id}
        )


class GitHubAccessError(AppException):
    """Raised when GitHub refuses access (private repo or rate limit)."""

    def __init__(self, message: str = "Repository is private or rate limit exceeded"):
        super().__init__(
            message=message,
            error_code="GITHUB_FORBIDDEN",
            status_code=403
        )


class GitHubAPIError(AppException):
    """Raised when a GitHub API call fails for any other reason."""

    def __init__(self, message: str, upstream_status: int = None):
        super().__init__(
            message=message,
            error_code="GITHUB_API_ERROR",
            status_code=502,
            details={"upstream_status": upstream_status} if upstream_status else {}
        )


class LLMNotConfiguredError(AppException):
    """Raised when an LLM call is attempted without an API key."""

    def __init__(self):
        super().__init__(
            message="OpenAI API key not configured",
            error_code="LLM_NOT_CONFIGURED",
            status_code=503
        )


class LLMError(AppException):
    """Raised when the LLM provider fails or returns nothing usable."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="LLM_ERROR",
            status_code=502
        )


def create_error_response(
    message: str,
    error_code: str = "INTERNAL_ERROR",
    status_code: int = 500,
    details: dict = None
) -> JSONResponse:
    """Create a standardized error response."""
    settings = get_settings()

    content = {
        "success": False,
        "error": message,
        "error_code": error_code,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

    # Include details in debug mode
    if details and settings.debug:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )


async def app_exception_handler(
    request: Request,
    exc: AppException
) -> JSONResponse:
    """Handle application-specific exceptions."""
    logger.warning(f"{exc.error_code} on {request.url.path}: {exc.message}")
    return create_error_response(
        message=exc.message,
        error_code=exc.error_code,
        status_code=exc.status_code,
        details=exc.details
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions."""
    return create_error_response(
        message=str(exc.detail),
        error_code="HTTP_ERROR",
        status_code=exc.status_code
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors."""
    errors = []
    for error in exc.errors():
        loc = " -> ".join(str(l) for l in error["loc"])
        errors.append(f"{loc}: {error['msg']}")

    return create_error_response(
        message="Validation error",
        error_code="VALIDATION_ERROR",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        details={"errors": errors}
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    settings = get_settings()

    logger.exception(f"Unexpected error on {request.url.path}: {exc}")

    details = None
    if settings.debug:
        details = {
            "exception_type": type(exc).__name__,
            "traceback": traceback.format_exc()
        }

    return create_error_response(
        message="An unexpected error occurred",
        error_code="INTERNAL_ERROR",
        status_code=500,
        details=details
    )
