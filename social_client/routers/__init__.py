"""Aggregate router exports."""
from .refresh import router as refresh_router

__all__ = ["refresh_router"]
