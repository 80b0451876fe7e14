"""
API Module
FastAPI routers for the deal pipeline service
"""

from .routes import router

__all__ = ["router"]
