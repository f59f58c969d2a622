"""API routes package."""

from shareline.routes.auth_routes import router as auth_router
from shareline.routes.file_routes import router as file_router
from shareline.routes.share_routes import router as share_router

__all__ = ["auth_router", "file_router", "share_router"]
