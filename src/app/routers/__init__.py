"""API routers for the attractions service."""

from app.routers.attractions import router as attractions_router

__all__ = ["attractions_router"]
