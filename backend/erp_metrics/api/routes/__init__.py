"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .dashboard import router as dashboard_router
from .inventory import router as inventory_router

api_router = APIRouter()
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(inventory_router, prefix="/inventory", tags=["inventory"])

__all__ = ["api_router"]
