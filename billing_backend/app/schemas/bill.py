"""
Pydantic schemas for bills and the analytics built on them.

The wire format uses camelCase keys, so every model declares aliases
and is dumped with ``by_alias=True``.  Bills themselves are free-form
documents and travel as plain dictionaries; only the computed results
get a schema.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self, **kwargs: Any) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, **kwargs)


class BillSummary(_CamelModel):
    """Collection-wide totals shown above the bill list."""

    total_bills: int = Field(0, alias="totalBills")
    overall_average_cost: float = Field(0, alias="overallAverageCost")
    # Distinct provider values; only reported when bills exist.
    provider_distribution: Optional[List[Any]] = Field(None, alias="providerDistribution")


class ProviderCount(_CamelModel):
    """One slice of the provider pie chart."""

    name: Any
    value: int


class BillsOverview(_CamelModel):
    bills: List[Dict[str, Any]] = Field(default_factory=list)
    summary: BillSummary = Field(default_factory=BillSummary)
    provider_counts: List[ProviderCount] = Field(default_factory=list, alias="providerCounts")

    def to_wire(self, **kwargs: Any) -> Dict[str, Any]:
        return {
            "bills": self.bills,
            "summary": self.summary.to_wire(exclude_none=True),
            "providerCounts": [entry.to_wire() for entry in self.provider_counts],
        }


class BillCreated(_CamelModel):
    message: str = "Bill data saved successfully."
    inserted_id: int = Field(..., alias="insertedId")


class ComparisonStats(_CamelModel):
    """Cost-per-unit statistics over a peer group."""

    average_cost_per_unit: float = Field(..., alias="averageCostPerUnit")
    min_cost_per_unit: float = Field(..., alias="minCostPerUnit")
    max_cost_per_unit: float = Field(..., alias="maxCostPerUnit")
    count: int


class ComparisonResult(_CamelModel):
    message: str
    user_cost_per_unit: float = Field(..., alias="userCostPerUnit")
    comparison: Optional[ComparisonStats] = None


class MessageResponse(BaseModel):
    """Error payload returned for every failed request."""

    message: str
