"""
Top-level router for the public API.

Aggregates the bill and comparison routers under one prefix.  The
health router is mounted separately at the application root by
``main.create_app``.
"""

from fastapi import APIRouter

from .endpoints import bills, compare

router = APIRouter()

router.include_router(bills.router, prefix="/bills", tags=["bills"])
router.include_router(compare.router, prefix="/compare", tags=["compare"])
