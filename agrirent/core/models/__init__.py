"""
Core domain models for the rental analytics and KYC reconciliation core.

All models use Pydantic for runtime validation; snapshot models are frozen.
"""

from .booking import Booking, BookingStatus, ItemCategory
from .events import Notification, UpsertEvent
from .item import APPROVED_ITEM_STATUS, Item
from .kyc import DocumentStatus, KycDocument, KycStatus, KycSubmission, RiskLevel
from .report import (
    AnalyticsReport,
    CategoryCount,
    HarvestMonth,
    HourBucket,
    ItemDemand,
    PriceTrend,
    RainyMonth,
    RegionalDemand,
    RegionIncome,
    RegionSupplyDemand,
    SeasonalSignals,
    ShortageEntry,
)
from .user import User, UserRole

__all__ = [
    "APPROVED_ITEM_STATUS",
    "AnalyticsReport",
    "Booking",
    "BookingStatus",
    "CategoryCount",
    "DocumentStatus",
    "HarvestMonth",
    "HourBucket",
    "Item",
    "ItemCategory",
    "ItemDemand",
    "KycDocument",
    "KycStatus",
    "KycSubmission",
    "Notification",
    "PriceTrend",
    "RainyMonth",
    "RegionIncome",
    "RegionSupplyDemand",
    "RegionalDemand",
    "RiskLevel",
    "SeasonalSignals",
    "ShortageEntry",
    "UpsertEvent",
    "User",
    "UserRole",
]
