"""API routes package."""

from server.routes.backup_routes import router as backup_router
from server.routes.file_routes import router as file_router

__all__ = ["backup_router", "file_router"]
