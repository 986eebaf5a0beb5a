"""
KYC submission models delivered by the verification change feed.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class KycStatus(str, Enum):
    """
    Submission states.

    Expected flow is Pending -> Approved | Rejected | ReuploadRequested and
    ReuploadRequested -> Pending on resubmission. Transitions are validated
    by the event producer, not here.
    """

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    REUPLOAD_REQUESTED = "ReuploadRequested"


class DocumentStatus(str, Enum):
    SUBMITTED = "Submitted"
    VERIFIED = "Verified"
    REUPLOAD_REQUESTED = "ReuploadRequested"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class KycDocument(BaseModel):
    """
    One uploaded identity document.

    Attributes:
        type: Document kind ("Aadhaar", "GST", "PAN", ...)
        status: Review state of this document
        url: Where the upload lives, if known
    """

    type: str
    status: str = DocumentStatus.SUBMITTED.value
    url: str | None = None

    class Config:
        frozen = True

    @field_validator("status", mode="before")
    @classmethod
    def null_status_to_default(cls, v):
        return DocumentStatus.SUBMITTED.value if v is None else v


class KycSubmission(BaseModel):
    """
    Current state of a supplier's verification submission.

    Explicit nulls from the feed are read as the field default.

    Attributes:
        id: Submission identity (reconciliation key)
        user_id: Weak reference to the submitting User
        status: Free-text review status, stored as delivered
        submitted_at: When the supplier submitted
        docs: Uploaded documents, in upload order
        risk_level: Reviewer risk assessment
        admin_notes: Reviewer notes, oldest first
    """

    id: int
    user_id: int = Field(..., alias="userId")
    status: str = KycStatus.PENDING.value
    submitted_at: datetime | None = Field(None, alias="submittedAt")
    docs: tuple[KycDocument, ...] = ()
    risk_level: RiskLevel = Field(RiskLevel.LOW, alias="riskLevel")
    admin_notes: tuple[str, ...] = Field((), alias="adminNotes")

    class Config:
        populate_by_name = True
        frozen = True
        json_schema_extra = {
            "example": {
                "id": 3,
                "userId": 12,
                "status": "Pending",
                "submittedAt": "2025-10-02T08:15:00Z",
                "docs": [
                    {"type": "Aadhaar", "status": "Submitted"},
                    {"type": "GST", "status": "Submitted"}
                ],
                "riskLevel": "LOW",
                "adminNotes": []
            }
        }

    @field_validator("status", "docs", "risk_level", "admin_notes", mode="before")
    @classmethod
    def null_to_default(cls, v, info: ValidationInfo):
        if v is None:
            return cls.model_fields[info.field_name].get_default()
        return v
