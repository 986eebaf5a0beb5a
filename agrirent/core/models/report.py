"""
AnalyticsReport model: the fixed-shape output of the aggregation engine.

Every view is a plain list of small row models so the whole report can be
serialized with ``model_dump(mode="json")`` and compared for equality.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .item import Item


class CategoryCount(BaseModel):
    category: str
    count: int

    @property
    def label(self) -> str:
        return f"{self.category} ({self.count} bookings)"


class ShortageEntry(BaseModel):
    """Undersupplied (category, location) pair."""

    category: str
    location: str
    searching: int
    available: int
    gap: int

    @property
    def key(self) -> str:
        """Display key, "category:location"."""
        return f"{self.category}:{self.location}"


class HourBucket(BaseModel):
    hour: str
    count: int


class ItemDemand(BaseModel):
    item: Item
    count: int


class PriceTrend(BaseModel):
    item_id: int
    item_name: str | None = None
    average_price: float
    bookings: int


class RegionSupplyDemand(BaseModel):
    region: str
    demand: int
    supply: int
    gap: int


class RegionIncome(BaseModel):
    region: str
    total: float


class HarvestMonth(BaseModel):
    month: int
    tractors: int
    harvesters: int


class RainyMonth(BaseModel):
    month: int
    tractors: int


class SeasonalSignals(BaseModel):
    harvest: list[HarvestMonth] = Field(default_factory=list)
    rainy: list[RainyMonth] = Field(default_factory=list)


class RegionalDemand(BaseModel):
    """
    Demand pressure for one region.

    score is bookings per listed item, or the raw booking count when the
    region has no items at all (unserved demand).
    """

    region: str
    bookings: int
    items: int
    score: float
    top_category: str | None = None


class AnalyticsReport(BaseModel):
    """
    All derived views for one set of snapshots.

    Attributes:
        evaluated_at: Evaluation time used for date fallbacks
        total_revenue: Sum of final prices over completed bookings
        total_completed_bookings: Number of completed bookings
        avg_booking_value: total_revenue / total_completed_bookings, or 0
        most_booked_category: Top category among completed bookings
        total_farmers / total_suppliers / total_items: Headline counts
        shortage: Top 5 undersupplied (category, location) pairs
        high_demand_windows: First 6 hour buckets, ascending by hour
        low_utilization_items: Up to 10 items with no bookings
        top_demand_machines: Top 10 items by booking count
        price_trends: Top 10 items by average completed price
        supply_vs_demand: Top 10 regions by demand minus supply
        income_by_region: Top 10 regions by completed income
        seasonal_signals: Harvest and rainy window counts
        regional_demand: Top 5 regions by demand score
    """

    evaluated_at: datetime
    total_revenue: float = 0.0
    total_completed_bookings: int = 0
    avg_booking_value: float = 0.0
    most_booked_category: CategoryCount | None = None
    total_farmers: int = 0
    total_suppliers: int = 0
    total_items: int = 0
    shortage: list[ShortageEntry] = Field(default_factory=list)
    high_demand_windows: list[HourBucket] = Field(default_factory=list)
    low_utilization_items: list[Item] = Field(default_factory=list)
    top_demand_machines: list[ItemDemand] = Field(default_factory=list)
    price_trends: list[PriceTrend] = Field(default_factory=list)
    supply_vs_demand: list[RegionSupplyDemand] = Field(default_factory=list)
    income_by_region: list[RegionIncome] = Field(default_factory=list)
    seasonal_signals: SeasonalSignals = Field(default_factory=SeasonalSignals)
    regional_demand: list[RegionalDemand] = Field(default_factory=list)

    @property
    def most_booked_category_label(self) -> str:
        if self.most_booked_category is None:
            return "N/A"
        return self.most_booked_category.label
