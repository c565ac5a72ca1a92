"""API routers."""

from viewer.routers.map import router as map_router

__all__ = ["map_router"]
