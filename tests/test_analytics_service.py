"""
Unit tests for the billing analytics engine.

The engine is exercised against a real temporary SQLite store, and
against a failing double for the error paths.
"""

import asyncio
import math
import random

import pytest

from billing_backend.app.core.errors import MissingFieldError, MissingParameterError, StorageError
from billing_backend.app.services.analytics_service import BillingAnalyticsEngine
from billing_backend.app.services.bill_store import BillStore


def run(coro):
    return asyncio.run(coro)


def _seed(store, bills):
    for bill in bills:
        store.insert_one(bill)


PEERS = [
    {"provider": "A", "city": "X", "unitsConsumed": 10.0, "totalAmount": 100.0},
    {"provider": "A", "city": "X", "unitsConsumed": 20.0, "totalAmount": 300.0},
]


class TestSummarize:
    def test_empty_store(self, store):
        overview = run(BillingAnalyticsEngine(store).summarize())
        assert overview.to_wire() == {
            "bills": [],
            "summary": {"totalBills": 0, "overallAverageCost": 0},
            "providerCounts": [],
        }

    def test_mean_of_ratios_not_ratio_of_sums(self, store):
        _seed(store, PEERS)
        overview = run(BillingAnalyticsEngine(store).summarize())
        # (10 + 15) / 2, whereas 400 / 30 would be 13.33
        assert overview.summary.overall_average_cost == pytest.approx(12.5)
        assert overview.summary.total_bills == 2

    def test_average_independent_of_order(self, tmp_path):
        bills = [
            {"provider": "P%d" % (i % 3), "city": "C", "unitsConsumed": float(i + 1), "totalAmount": float(7 * i + 3)}
            for i in range(12)
        ]
        expected = sum(b["totalAmount"] / b["unitsConsumed"] for b in bills) / len(bills)

        shuffled = list(bills)
        random.Random(4).shuffle(shuffled)
        averages = []
        for index, ordering in enumerate([bills, shuffled]):
            store = BillStore(str(tmp_path / ("order%d.db" % index)))
            store.initialize()
            _seed(store, ordering)
            averages.append(run(BillingAnalyticsEngine(store).summarize()).summary.overall_average_cost)
        assert averages[0] == pytest.approx(expected)
        assert averages[1] == pytest.approx(expected)

    def test_provider_counts_sum_to_total(self, store):
        _seed(store, PEERS + [
            {"provider": "B", "city": "Y", "unitsConsumed": 5, "totalAmount": 10},
            {"provider": "C", "city": "Y", "unitsConsumed": 5, "totalAmount": 10},
            {"provider": "B", "city": "Z", "unitsConsumed": 5, "totalAmount": 10},
        ])
        overview = run(BillingAnalyticsEngine(store).summarize())
        counts = {entry.name: entry.value for entry in overview.provider_counts}
        assert counts == {"A": 2, "B": 2, "C": 1}
        assert sum(counts.values()) == overview.summary.total_bills == len(overview.bills)

    def test_summary_lists_distinct_providers(self, store):
        _seed(store, PEERS + [{"provider": "B", "city": "Y", "unitsConsumed": 1, "totalAmount": 2}])
        wire = run(BillingAnalyticsEngine(store).summarize()).to_wire()
        assert sorted(wire["summary"]["providerDistribution"]) == ["A", "B"]

    def test_nan_bill_makes_average_nan(self, store):
        _seed(store, PEERS + [{"provider": "A", "city": "X", "unitsConsumed": 2.0, "totalAmount": math.nan}])
        overview = run(BillingAnalyticsEngine(store).summarize())
        assert math.isnan(overview.summary.overall_average_cost)

    def test_storage_failure(self, failing_store):
        with pytest.raises(StorageError) as excinfo:
            run(BillingAnalyticsEngine(failing_store).summarize())
        assert excinfo.value.message == "Error fetching data from database."


class TestInsert:
    def test_valid_bill_is_coerced_and_stored(self, store):
        engine = BillingAnalyticsEngine(store)
        created = run(engine.insert({
            "provider": "A", "city": "X", "unitsConsumed": "12", "totalAmount": " 60.5 ", "month": "May",
        }))
        bills = store.find_all()
        assert len(bills) == 1
        assert bills[0]["id"] == created.inserted_id
        assert bills[0]["unitsConsumed"] == 12.0
        assert bills[0]["totalAmount"] == 60.5
        assert bills[0]["month"] == "May"
        assert created.to_wire() == {"message": "Bill data saved successfully.", "insertedId": created.inserted_id}

    def test_non_numeric_is_stored_as_nan(self, store):
        run(BillingAnalyticsEngine(store).insert({"provider": "A", "unitsConsumed": "lots", "totalAmount": 10}))
        bill = store.find_all()[0]
        assert math.isnan(bill["unitsConsumed"])
        assert bill["totalAmount"] == 10.0

    @pytest.mark.parametrize("field", ["provider", "totalAmount", "unitsConsumed"])
    def test_missing_field_rejected_without_mutation(self, store, field):
        candidate = {"provider": "A", "city": "X", "unitsConsumed": 10, "totalAmount": 100}
        del candidate[field]
        with pytest.raises(MissingFieldError) as excinfo:
            run(BillingAnalyticsEngine(store).insert(candidate))
        assert excinfo.value.fields == [field]
        assert excinfo.value.message == "Missing required fields."
        assert store.find_all() == []

    @pytest.mark.parametrize("value", [None, "", False])
    def test_empty_values_count_as_missing(self, store, value):
        with pytest.raises(MissingFieldError):
            run(BillingAnalyticsEngine(store).insert({"provider": value, "unitsConsumed": 1, "totalAmount": 1}))

    def test_zero_is_missing_by_default(self, store):
        engine = BillingAnalyticsEngine(store)
        with pytest.raises(MissingFieldError) as excinfo:
            run(engine.insert({"provider": "A", "unitsConsumed": 0, "totalAmount": 0}))
        assert excinfo.value.fields == ["totalAmount", "unitsConsumed"]
        assert store.find_all() == []

    def test_zero_string_is_present(self, store):
        run(BillingAnalyticsEngine(store).insert({"provider": "A", "unitsConsumed": "0", "totalAmount": "5"}))
        assert store.find_all()[0]["unitsConsumed"] == 0.0

    def test_zero_accepted_when_policy_allows(self, store):
        engine = BillingAnalyticsEngine(store, zero_is_missing=False)
        run(engine.insert({"provider": "A", "city": "X", "unitsConsumed": 0, "totalAmount": 0}))
        bill = store.find_all()[0]
        assert bill["unitsConsumed"] == 0.0
        assert bill["totalAmount"] == 0.0

    def test_storage_failure(self, failing_store):
        store = failing_store
        with pytest.raises(StorageError) as excinfo:
            run(BillingAnalyticsEngine(store).insert({"provider": "A", "unitsConsumed": 1, "totalAmount": 1}))
        assert excinfo.value.message == "Error saving data."
        assert store.calls == ["insert_one"]


class TestCompare:
    def test_peer_group_statistics(self, store):
        _seed(store, PEERS)
        result = run(BillingAnalyticsEngine(store).compare("A", "X", "5", "50"))
        assert result.to_wire() == {
            "message": "Analysis complete",
            "userCostPerUnit": 10.0,
            "comparison": {
                "averageCostPerUnit": 12.5,
                "minCostPerUnit": 10.0,
                "maxCostPerUnit": 15.0,
                "count": 2,
            },
        }

    def test_unreadable_peer_reading(self, store):
        _seed(store, PEERS + [{"provider": "A", "city": "X", "unitsConsumed": math.nan, "totalAmount": 50.0}])
        comparison = run(BillingAnalyticsEngine(store).compare("A", "X", "5", "50")).comparison
        assert comparison.count == 3
        assert math.isnan(comparison.min_cost_per_unit)
        assert comparison.max_cost_per_unit == 15.0
        assert math.isnan(comparison.average_cost_per_unit)

    def test_zero_unit_peer_gives_infinite_max(self, store):
        _seed(store, PEERS + [{"provider": "A", "city": "X", "unitsConsumed": 0.0, "totalAmount": 50.0}])
        comparison = run(BillingAnalyticsEngine(store).compare("A", "X", "5", "50")).comparison
        assert comparison.count == 3
        assert comparison.min_cost_per_unit == 10.0
        assert comparison.max_cost_per_unit == math.inf
        assert comparison.average_cost_per_unit == math.inf

    def test_peer_group_is_case_sensitive(self, store):
        _seed(store, PEERS)
        result = run(BillingAnalyticsEngine(store).compare("a", "X", "5", "50"))
        assert result.comparison is None
        assert result.message == "Not enough data for comparison"

    def test_empty_peer_group(self, store):
        result = run(BillingAnalyticsEngine(store).compare("A", "X", "4", "10"))
        assert result.to_wire() == {
            "message": "Not enough data for comparison",
            "userCostPerUnit": 2.5,
            "comparison": None,
        }

    def test_zero_like_inputs_pass_through(self, store):
        engine = BillingAnalyticsEngine(store)
        infinite = run(engine.compare("A", "X", "0", "50"))
        assert infinite.user_cost_per_unit == math.inf
        undefined = run(engine.compare("A", "X", "0", "0"))
        assert math.isnan(undefined.user_cost_per_unit)
        garbage = run(engine.compare("A", "X", "ten", "50"))
        assert math.isnan(garbage.user_cost_per_unit)

    @pytest.mark.parametrize("missing", ["provider", "city", "units", "amount"])
    def test_missing_parameter(self, store, missing):
        params = {"provider": "A", "city": "X", "units": "5", "amount": "50"}
        params[missing] = None
        with pytest.raises(MissingParameterError) as excinfo:
            run(BillingAnalyticsEngine(store).compare(**params))
        assert excinfo.value.parameters == [missing]
        assert excinfo.value.message == "Missing query parameters for comparison."

    def test_empty_string_parameter_is_missing(self, store):
        with pytest.raises(MissingParameterError):
            run(BillingAnalyticsEngine(store).compare("A", "", "5", "50"))

    def test_storage_failure(self, failing_store):
        with pytest.raises(StorageError) as excinfo:
            run(BillingAnalyticsEngine(failing_store).compare("A", "X", "5", "50"))
        assert excinfo.value.message == "Error performing analysis."
