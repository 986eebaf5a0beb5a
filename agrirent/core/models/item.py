"""
Item model representing a machine listed by a supplier.
"""

from pydantic import BaseModel, ValidationInfo, field_validator

APPROVED_ITEM_STATUS = "approved"


class Item(BaseModel):
    """
    A listed machine (read-only for the analytics core).

    Attributes:
        id: Item identity
        name: Display label
        category: Machine category, shared with Booking.item_category
        location: Region where the machine is listed
        available: Whether the supplier currently offers it
        status: Listing moderation state ("approved", "pending", ...)
    """

    id: int
    name: str = ""
    category: str | None = None
    location: str | None = None
    available: bool = False
    status: str | None = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "id": 7,
                "name": "Mahindra 575 DI",
                "category": "Tractors",
                "location": "Nashik",
                "available": True,
                "status": "approved"
            }
        }

    @property
    def is_supply(self) -> bool:
        """True when the item counts as bookable supply."""
        return self.available and self.status == APPROVED_ITEM_STATUS

    @field_validator("name", "available", mode="before")
    @classmethod
    def null_to_default(cls, v, info: ValidationInfo):
        # Record sources send explicit nulls for unset columns
        if v is None:
            return cls.model_fields[info.field_name].get_default()
        return v
