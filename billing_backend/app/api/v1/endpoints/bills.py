"""
Bill endpoints.

``GET /bills`` returns every stored bill along with collection-wide
statistics for the data explorer: the number of bills, the average
cost per unit and a per-provider count suitable for a pie chart.
``POST /bills`` stores a new bill.  Only ``provider``, ``totalAmount``
and ``unitsConsumed`` are required; any other fields are stored as
sent.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status

from billing_backend.app.api.deps import get_engine
from billing_backend.app.schemas.bill import BillCreated, BillsOverview, MessageResponse
from billing_backend.app.services.analytics_service import BillingAnalyticsEngine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=None,
    responses={
        status.HTTP_200_OK: {"model": BillsOverview},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": MessageResponse},
    },
)
async def list_bills(engine: BillingAnalyticsEngine = Depends(get_engine)) -> Dict[str, Any]:
    """Return all bills plus summary statistics."""
    logger.info("GET request received for /bills")
    overview = await engine.summarize()
    return overview.to_wire()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=None,
    responses={
        status.HTTP_201_CREATED: {"model": BillCreated},
        status.HTTP_400_BAD_REQUEST: {"model": MessageResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": MessageResponse},
    },
)
async def create_bill(
    bill_in: Optional[Dict[str, Any]] = Body(None),
    engine: BillingAnalyticsEngine = Depends(get_engine),
) -> Dict[str, Any]:
    """Store a new bill and return its identifier."""
    # An absent or null body is an empty bill.
    created = await engine.insert(bill_in or {})
    return created.to_wire()
