"""
API Routes - FastAPI route modules.

All routers are mounted under the configured API prefix (``/api/v1``).
"""

from docubuddy.api.routes.health import router as health_router
from docubuddy.api.routes.repositories import router as repositories_router
from docubuddy.api.routes.functions import router as functions_router
from docubuddy.api.routes.qa import router as qa_router
from docubuddy.api.routes.chat import router as chat_router
from docubuddy.api.routes.search import router as search_router

__all__ = [
    "health_router",
    "repositories_router",
    "functions_router",
    "qa_router",
    "chat_router",
    "search_router",
]
