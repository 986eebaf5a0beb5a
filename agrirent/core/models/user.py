"""
User model representing a marketplace account.
"""

from enum import Enum

from pydantic import BaseModel, field_validator


class UserRole(str, Enum):
    FARMER = "Farmer"
    SUPPLIER = "Supplier"
    ADMIN = "Admin"


class User(BaseModel):
    """
    A marketplace account.

    Attributes:
        id: User identity
        role: "Farmer", "Supplier" or "Admin"
        name: Display name
        phone: Contact number
        location: Home region
        status: Account approval flag ("approved", "rejected", "pending")
    """

    id: int
    role: str
    name: str = ""
    phone: str | None = None
    location: str | None = None
    status: str | None = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "id": 12,
                "role": "Supplier",
                "name": "Ravi Patil",
                "phone": "+91 98220 00000",
                "location": "Nashik",
                "status": "approved"
            }
        }

    @property
    def is_approved(self) -> bool:
        return self.status == "approved"

    @field_validator("name", mode="before")
    @classmethod
    def null_name_to_empty(cls, v):
        return "" if v is None else v
