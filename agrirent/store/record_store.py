"""
Record store read contract and an in-memory implementation.

The analytics core treats the record source as opaque: it only needs
snapshot reads plus the few pass-through mutations used by KYC admin
actions. InMemoryRecordStore backs the CLIs and tests.
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable

from agrirent.core.models import Booking, Item, KycSubmission, User


class RecordStore(ABC):
    """
    Source of Booking, Item, User and KycSubmission snapshots.

    list_* methods return immutable point-in-time tuples in source order.
    """

    @abstractmethod
    def list_bookings(self) -> tuple[Booking, ...]:
        pass

    @abstractmethod
    def list_items(self) -> tuple[Item, ...]:
        pass

    @abstractmethod
    def list_users(self) -> tuple[User, ...]:
        pass

    @abstractmethod
    def list_kyc_submissions(self) -> tuple[KycSubmission, ...]:
        pass

    @abstractmethod
    def update_user_status(self, user_id: int, status: str) -> User | None:
        """Set a user's approval flag; returns the updated user or None if unknown."""
        pass

    @abstractmethod
    def find_submission_for_user(self, user_id: int) -> KycSubmission | None:
        """First stored submission for the user, or None."""
        pass

    @abstractmethod
    def save_submission(self, submission: KycSubmission) -> None:
        """Insert or replace a submission by id."""
        pass


class InMemoryRecordStore(RecordStore):
    """
    RecordStore holding plain lists guarded by a lock.

    Snapshots are copied out as tuples, so callers never observe later writes.
    """

    def __init__(
        self,
        bookings: Iterable[Booking] = (),
        items: Iterable[Item] = (),
        users: Iterable[User] = (),
        kyc_submissions: Iterable[KycSubmission] = (),
    ):
        self._lock = threading.Lock()
        self._bookings = list(bookings)
        self._items = list(items)
        self._users = list(users)
        self._submissions = list(kyc_submissions)

    def list_bookings(self) -> tuple[Booking, ...]:
        with self._lock:
            return tuple(self._bookings)

    def list_items(self) -> tuple[Item, ...]:
        with self._lock:
            return tuple(self._items)

    def list_users(self) -> tuple[User, ...]:
        with self._lock:
            return tuple(self._users)

    def list_kyc_submissions(self) -> tuple[KycSubmission, ...]:
        with self._lock:
            return tuple(self._submissions)

    def add_bookings(self, bookings: Iterable[Booking]) -> None:
        with self._lock:
            self._bookings.extend(bookings)

    def update_user_status(self, user_id: int, status: str) -> User | None:
        with self._lock:
            for idx, user in enumerate(self._users):
                if user.id == user_id:
                    updated = user.model_copy(update={"status": status})
                    self._users[idx] = updated
                    return updated
        return None

    def find_submission_for_user(self, user_id: int) -> KycSubmission | None:
        with self._lock:
            return next((s for s in self._submissions if s.user_id == user_id), None)

    def save_submission(self, submission: KycSubmission) -> None:
        with self._lock:
            for idx, existing in enumerate(self._submissions):
                if existing.id == submission.id:
                    self._submissions[idx] = submission
                    return
            self._submissions.append(submission)
