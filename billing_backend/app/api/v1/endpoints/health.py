"""
Health check endpoint.

Reports whether the bill store answers a trivial query.  Used by
container orchestrators and load balancers; it never raises.
"""

import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from billing_backend.app.api.deps import get_store
from billing_backend.app.core.errors import StorageError
from billing_backend.app.core.responses import BillingJSONResponse
from billing_backend.app.services.bill_store import BillStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=None)
async def health_check(store: BillStore = Depends(get_store)) -> Any:
    try:
        await asyncio.to_thread(store.ping)
    except StorageError as exc:
        logger.error("Health check failed: %s", exc)
        return BillingJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable"},
        )
    body: Dict[str, Any] = {"status": "ok"}
    return body
