"""
Change-feed reconciler for KYC submissions.

Merges an ordered stream of upsert events into one canonical in-memory
collection holding at most one entry per submission id:

- a known id is replaced in place, so a row under review keeps its position
- an unseen id is inserted at the front, so new submissions surface first
- nothing is ever removed

The collection is published as an immutable tuple. apply_event builds the
next tuple and swaps it under a lock, so snapshot() readers on other
threads always see a fully applied state.
"""

import threading
from collections.abc import Iterable

from agrirent.core.models import KycSubmission, UpsertEvent
from agrirent.observability.logger import get_logger
from agrirent.observability.metrics import (
    feed_delivery_failures_total,
    feed_events_applied_total,
    feed_stale,
    increment_counter,
    reconciled_submissions,
    set_gauge,
)
from agrirent.streaming.sources import FeedDeliveryFailure, FeedSource

logger = get_logger(__name__)


class ChangeFeedReconciler:
    """
    Single-writer reconciled view of KYC submissions.

    Events must be applied in delivery order; last applied wins. Status
    transitions are not validated here.
    """

    def __init__(self, initial: Iterable[KycSubmission] = ()):
        self._lock = threading.Lock()
        self._current: tuple[KycSubmission, ...] = ()
        self._source: FeedSource | None = None
        self._last_error: FeedDeliveryFailure | None = None
        self.events_applied = 0
        if initial:
            self.seed(initial)

    def snapshot(self) -> tuple[KycSubmission, ...]:
        """Current collection, newest-relevant first."""
        return self._current

    def __len__(self) -> int:
        return len(self._current)

    @property
    def is_stale(self) -> bool:
        """True after a delivery failure until the next event arrives."""
        return self._last_error is not None

    @property
    def last_error(self) -> FeedDeliveryFailure | None:
        return self._last_error

    def apply_event(self, event: UpsertEvent) -> None:
        """
        Apply one upsert event.

        Applying the same event twice leaves order and content unchanged.
        """
        record = event.record
        with self._lock:
            current = self._current
            index = next((i for i, s in enumerate(current) if s.id == record.id), None)
            if index is not None:
                self._current = current[:index] + (record,) + current[index + 1:]
                operation = "replace"
            else:
                self._current = (record,) + current
                operation = "insert"
            self._last_error = None
            self.events_applied += 1
            size = len(self._current)

        increment_counter(feed_events_applied_total, operation=operation)
        set_gauge(reconciled_submissions, size)
        set_gauge(feed_stale, 0)
        logger.debug(
            f"Applied {operation} for submission {record.id}",
            extra={"submission_id": record.id, "user_id": record.user_id, "status": record.status},
        )

    def seed(self, records: Iterable[KycSubmission]) -> None:
        """
        Merge an initial load from the record source.

        Known ids are replaced in place; unseen ids are appended in load
        order, behind anything the feed already delivered.
        """
        with self._lock:
            merged = list(self._current)
            positions = {s.id: i for i, s in enumerate(merged)}
            for record in records:
                if record.id in positions:
                    merged[positions[record.id]] = record
                else:
                    positions[record.id] = len(merged)
                    merged.append(record)
            self._current = tuple(merged)
            size = len(self._current)

        set_gauge(reconciled_submissions, size)
        logger.info(f"Seeded reconciler with {size} submissions", extra={"submissions": size})

    def find_for_user(self, user_id: int) -> KycSubmission | None:
        """First submission for the user in presentation order."""
        return next((s for s in self._current if s.user_id == user_id), None)

    def report_feed_failure(self, failure: FeedDeliveryFailure) -> None:
        """Record a delivery failure; the collection itself is left as is."""
        self._last_error = failure
        increment_counter(feed_delivery_failures_total)
        set_gauge(feed_stale, 1)
        logger.warning(
            "Change feed delivery failed; reconciled view is stale",
            extra={"source_id": failure.source_id, "error_message": failure.message},
        )

    def attach(self, source: FeedSource) -> None:
        """Subscribe to a feed source. Only one source may be attached."""
        if self._source is not None:
            raise RuntimeError(f"Reconciler already attached to {self._source!r}")
        source.subscribe(self.apply_event, self.report_feed_failure)
        self._source = source
        logger.info(f"Attached reconciler to {source!r}")

    def teardown(self) -> None:
        """Detach from the feed. Idempotent; the collection is kept."""
        source, self._source = self._source, None
        if source is None:
            return
        source.unsubscribe()
        logger.info(f"Detached reconciler from {source!r}")
