"""API endpoints."""

from monitor.api.routes import router

__all__ = ["router"]
