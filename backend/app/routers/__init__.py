"""
FastAPI routers for the VEC upload service.
"""

from app.routers import upload

__all__ = ["upload"]
