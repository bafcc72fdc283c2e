"""API routes package."""

from gramstore.routes.file_routes import router as file_router
from gramstore.routes.folder_routes import router as folder_router

__all__ = ["file_router", "folder_router"]
