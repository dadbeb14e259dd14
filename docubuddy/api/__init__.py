"""
API Layer - FastAPI routes and middleware.

Routers live in ``docubuddy.api.routes``; exception types and their
handlers live in ``docubuddy.api.middleware``.
"""
