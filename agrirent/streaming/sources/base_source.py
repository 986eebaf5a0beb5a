"""
Change-feed source interface.

A feed source owns the subscription lifecycle (connect, reconnect,
unsubscribe) and delivers events in the order it receives them. Consumers
only react to what is delivered.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from agrirent.core.models import UpsertEvent

EventHandler = Callable[[UpsertEvent], None]


class FeedDeliveryFailure(Exception):
    """
    Raised or reported when the feed cannot deliver events.

    Consumers surface it as staleness; retrying is the source's job.
    """

    def __init__(self, source_id: str, message: str):
        self.source_id = source_id
        self.message = message
        super().__init__(f"[{source_id}] {message}")


ErrorHandler = Callable[[FeedDeliveryFailure], None]


class FeedSource(ABC):
    """
    Abstract ordered event source for KYC submission upserts.
    """

    def __init__(self, source_id: str):
        self.source_id = source_id

    @abstractmethod
    def subscribe(self, on_event: EventHandler, on_error: ErrorHandler | None = None) -> None:
        """
        Start delivering events to ``on_event``.

        Delivery failures go to ``on_error`` when given, otherwise they are
        raised as FeedDeliveryFailure.
        """
        pass

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop delivery. Calling it more than once is a no-op."""
        pass

    @property
    @abstractmethod
    def is_subscribed(self) -> bool:
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(source_id={self.source_id})"
