"""API routes package."""

from tracker.routes.registry_routes import router as registry_router

__all__ = ["registry_router"]
