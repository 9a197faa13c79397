"""API routes package."""

from server.routes.auth_routes import router as auth_router
from server.routes.transfer_routes import router as transfer_router
from server.routes.transfer_routes import blob_router

__all__ = ["auth_router", "transfer_router", "blob_router"]
