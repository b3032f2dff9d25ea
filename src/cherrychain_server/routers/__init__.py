"""API routers for CherryChain."""

from cherrychain_server.routers.world import router as world_router
from cherrychain_server.routers.ws import router as ws_router

__all__ = ["world_router", "ws_router"]
