"""
Top‑level router for the ``/api`` prefix.

This router aggregates the area routers.  When new endpoints are added,
update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import guests, health

router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(guests.router, prefix="/guests", tags=["guests"])
