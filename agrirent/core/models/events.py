"""
Change-feed event and notification models.
"""

from pydantic import BaseModel

from .kyc import KycSubmission


class UpsertEvent(BaseModel):
    """
    A feed message meaning "this is the current state of this record".

    Attributes:
        record: Full submission state (not a delta)
        event_type: Label the feed attached ("INSERT", "UPDATE", "UPSERT")
    """

    record: KycSubmission
    event_type: str = "UPSERT"

    class Config:
        frozen = True


class Notification(BaseModel):
    """
    Outbound message handed to the notifier collaborator.

    Attributes:
        user_id: Recipient; 0 addresses the admin channel
        message: Human-readable text
        type: Notification channel
    """

    user_id: int
    message: str
    type: str = "admin"

    class Config:
        frozen = True
