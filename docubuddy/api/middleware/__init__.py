"""
API Middleware - Request/response processing middleware.
"""

from docubuddy.api.middleware.error_handler import (
    AppException,
    InvalidRepositoryURLError,
    RepositoryNotFoundError,
    RecordNotFoundError,
    GitHubAccessError,
    GitHubAPIError,
    LLMNotConfiguredError,
    LLMError,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)

__all__ = [
    "AppException",
    "InvalidRepositoryURLError",
    "RepositoryNotFoundError",
    "RecordNotFoundError",
    "GitHubAccessError",
    "GitHubAPIError",
    "LLMNotConfiguredError",
    "LLMError",
    "app_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "generic_exception_handler",
]
