"""
Billing analytics engine.

The engine implements the three operations behind the public API:
summarising the whole collection, inserting a bill and comparing a
caller's bill against bills from the same provider and city.

Cost per unit is always ``totalAmount / unitsConsumed`` of a single
bill, and averages are the plain mean of those ratios (not total
amount over total units).  The engine keeps no state of its own; the
store it is given owns every record.  Store calls are blocking and
run in worker threads, and independent reads are issued together and
joined before the result is assembled.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from billing_backend.app.core.errors import (
    MissingFieldError,
    MissingParameterError,
    StorageError,
)
from billing_backend.app.core.numeric import (
    cost_per_unit,
    is_present,
    mean,
    nan_aware_max,
    nan_aware_min,
    to_number,
)
from billing_backend.app.schemas.bill import (
    BillCreated,
    BillsOverview,
    BillSummary,
    ComparisonResult,
    ComparisonStats,
    ProviderCount,
)
from billing_backend.app.services.bill_store import BillStore

logger = logging.getLogger(__name__)

REQUIRED_BILL_FIELDS = ("provider", "totalAmount", "unitsConsumed")
COMPARE_PARAMETERS = ("provider", "city", "units", "amount")

FETCH_FAILED = "Error fetching data from database."
SAVE_FAILED = "Error saving data."
ANALYSIS_FAILED = "Error performing analysis."

NOT_ENOUGH_DATA = "Not enough data for comparison"
ANALYSIS_COMPLETE = "Analysis complete"


class BillingAnalyticsEngine:
    """Stateless analytics over a ``BillStore``.

    Parameters
    ----------
    store : BillStore
        Any object providing ``insert_one``, ``find_all``,
        ``find_measurements`` and ``count_by_provider``.
    zero_is_missing : bool
        Whether a numeric zero for a required bill field is treated as
        absent on insert.
    """

    def __init__(self, store: BillStore, zero_is_missing: bool = True) -> None:
        self.store = store
        self.zero_is_missing = zero_is_missing

    async def summarize(self) -> BillsOverview:
        """Return every bill together with collection-wide statistics."""
        try:
            bills, measurements, provider_counts = await asyncio.gather(
                asyncio.to_thread(self.store.find_all),
                asyncio.to_thread(self.store.find_measurements),
                asyncio.to_thread(self.store.count_by_provider),
            )
        except StorageError as exc:
            logger.exception("Failed to fetch bills and stats: %s", exc)
            raise StorageError(FETCH_FAILED) from exc

        counts = [ProviderCount(name=name, value=count) for name, count in provider_counts]
        return BillsOverview(
            bills=bills,
            summary=self._summary(measurements, counts),
            provider_counts=counts,
        )

    async def insert(self, candidate: Mapping[str, Any]) -> BillCreated:
        """Validate, coerce and persist a new bill.

        Raises ``MissingFieldError`` before touching the store if any
        required field is absent.
        """
        missing = [
            name
            for name in REQUIRED_BILL_FIELDS
            if not is_present(candidate.get(name), zero_is_missing=self.zero_is_missing)
        ]
        if missing:
            logger.info("Rejected bill, missing fields: %s", ", ".join(missing))
            raise MissingFieldError(missing)

        record: Dict[str, Any] = dict(candidate)
        record["unitsConsumed"] = to_number(candidate["unitsConsumed"])
        record["totalAmount"] = to_number(candidate["totalAmount"])
        try:
            bill_id = await asyncio.to_thread(self.store.insert_one, record)
        except StorageError as exc:
            logger.exception("Failed to save bill: %s", exc)
            raise StorageError(SAVE_FAILED) from exc
        return BillCreated(inserted_id=bill_id)

    async def compare(
        self,
        provider: Optional[str],
        city: Optional[str],
        units: Any,
        amount: Any,
    ) -> ComparisonResult:
        """Compare a caller's cost per unit with their peer group."""
        supplied = {"provider": provider, "city": city, "units": units, "amount": amount}
        missing = [name for name in COMPARE_PARAMETERS if not is_present(supplied[name])]
        if missing:
            raise MissingParameterError(missing)

        user_cost = cost_per_unit(to_number(amount), to_number(units))
        try:
            measurements = await asyncio.to_thread(
                self.store.find_measurements, provider=provider, city=city
            )
        except StorageError as exc:
            logger.exception("Analysis failed: %s", exc)
            raise StorageError(ANALYSIS_FAILED) from exc

        stats = self._peer_stats(measurements)
        if stats is None:
            return ComparisonResult(message=NOT_ENOUGH_DATA, user_cost_per_unit=user_cost)
        return ComparisonResult(
            message=ANALYSIS_COMPLETE,
            user_cost_per_unit=user_cost,
            comparison=stats,
        )

    @staticmethod
    def _costs(measurements: List[Tuple[float, float]]) -> List[float]:
        return [cost_per_unit(amount, units) for units, amount in measurements]

    def _summary(self, measurements: List[Tuple[float, float]], counts: List[ProviderCount]) -> BillSummary:
        if not measurements:
            return BillSummary(total_bills=0, overall_average_cost=0)
        return BillSummary(
            total_bills=len(measurements),
            overall_average_cost=mean(self._costs(measurements)),
            provider_distribution=[entry.name for entry in counts],
        )

    def _peer_stats(self, measurements: List[Tuple[float, float]]) -> Optional[ComparisonStats]:
        if not measurements:
            return None
        costs = self._costs(measurements)
        return ComparisonStats(
            average_cost_per_unit=mean(costs),
            min_cost_per_unit=nan_aware_min(costs),
            max_cost_per_unit=nan_aware_max(costs),
            count=len(costs),
        )
