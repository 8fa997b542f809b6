"""
Top‑level router for version 1 of the API.

This router aggregates the bike and component routers under a unified
prefix.  When new endpoints are added, update this file to include
their routers.
"""

from fastapi import APIRouter

from .endpoints import bikes, components

router = APIRouter()

router.include_router(bikes.router, prefix="/bikes", tags=["bikes"])
router.include_router(components.router, prefix="/components", tags=["components"])
