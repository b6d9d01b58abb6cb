"""
FastAPI dependencies shared by the endpoint modules.
"""

from fastapi import Request

from billing_backend.app.services.analytics_service import BillingAnalyticsEngine
from billing_backend.app.services.bill_store import BillStore


def get_engine(request: Request) -> BillingAnalyticsEngine:
    """Return the engine built during application startup."""
    return request.app.state.engine


def get_store(request: Request) -> BillStore:
    return request.app.state.engine.store
