"""
Core Module - Configuration and dependency injection.

Service singletons are provided by ``docubuddy.core.dependencies``.
"""

from docubuddy.core.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
