"""
Peer comparison endpoint.

Given a caller's provider, city, units and amount, report their cost
per unit next to the average, minimum and maximum cost per unit of
every stored bill with the same provider and city.  Matching is exact
and case sensitive.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from billing_backend.app.api.deps import get_engine
from billing_backend.app.schemas.bill import ComparisonResult, MessageResponse
from billing_backend.app.services.analytics_service import BillingAnalyticsEngine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=None,
    responses={
        status.HTTP_200_OK: {"model": ComparisonResult},
        status.HTTP_400_BAD_REQUEST: {"model": MessageResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": MessageResponse},
    },
)
async def compare_bill(
    provider: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    units: Optional[str] = Query(None, description="Units consumed on the caller's bill"),
    amount: Optional[str] = Query(None, description="Total amount of the caller's bill"),
    engine: BillingAnalyticsEngine = Depends(get_engine),
) -> Dict[str, Any]:
    """Compare the caller's cost per unit with their peers."""
    logger.info("GET request received for /compare (provider=%s, city=%s)", provider, city)
    result = await engine.compare(provider=provider, city=city, units=units, amount=amount)
    return result.to_wire()
