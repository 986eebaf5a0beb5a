"""
Booking model representing a farmer's rental request for a machine.
"""

from enum import Enum

from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    """Booking lifecycle states the analytics care about."""

    SEARCHING = "Searching"
    PENDING_CONFIRMATION = "Pending Confirmation"
    CONFIRMED = "Confirmed"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ItemCategory(str, Enum):
    """
    Machine categories with fixed roles in the seasonal views.

    Categories are open-ended in the record source; any other string is
    accepted and grouped as an opaque key.
    """

    TRACTORS = "Tractors"
    HARVESTERS = "Harvesters"


class Booking(BaseModel):
    """
    A single booking snapshot row (read-only for the analytics core).

    Attributes:
        id: Booking identity
        item_id: Weak reference to the booked Item (absent while searching)
        item_category: Category of machine requested
        location: Free-text region key ("Unknown" when absent, at grouping time)
        status: Booking status, e.g. "Searching" or "Completed"
        start_time: HH:MM start time (defaults to "00:00" when bucketing)
        date: ISO date or datetime of the booking
        final_price: Settled price, present only once completed
    """

    id: int
    item_id: int | None = Field(None, alias="itemId")
    item_category: str | None = Field(None, alias="itemCategory")
    location: str | None = None
    status: str
    start_time: str | None = Field(None, alias="startTime")
    date: str | None = None
    final_price: float | None = Field(None, ge=0, alias="finalPrice")

    class Config:
        populate_by_name = True
        frozen = True
        json_schema_extra = {
            "example": {
                "id": 101,
                "itemId": 7,
                "itemCategory": "Tractors",
                "location": "Nashik",
                "status": "Completed",
                "startTime": "09:30",
                "date": "2025-10-04",
                "finalPrice": 2400.0
            }
        }

    @property
    def is_completed(self) -> bool:
        return self.status == BookingStatus.COMPLETED

    @property
    def is_searching(self) -> bool:
        return self.status == BookingStatus.SEARCHING
