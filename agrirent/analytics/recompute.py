"""
Explicit recomputation trigger for the analytics report.

The engine is a pure function; this module decides when to call it. The
caller passes snapshots in, and the report is recomputed only when their
fingerprint differs from the one the cached report was built from.
"""

import hashlib
import json
import threading
from collections.abc import Sequence
from datetime import datetime

from agrirent.analytics.engine import compute_report
from agrirent.core.models import AnalyticsReport, Booking, Item, User
from agrirent.observability.logger import get_logger, log_operation
from agrirent.observability.metrics import (
    increment_counter,
    report_compute_duration_seconds,
    report_input_records,
    reports_computed_total,
    set_gauge,
    track_duration,
)
from agrirent.store import RecordStore

logger = get_logger(__name__)


def snapshot_fingerprint(
    bookings: Sequence[Booking],
    items: Sequence[Item],
    users: Sequence[User],
) -> str:
    """
    MD5 fingerprint of the three snapshots, order-sensitive.

    Order matters because tie-breaks follow input order.
    """
    payload = {
        "bookings": [b.model_dump(mode="json") for b in bookings],
        "items": [i.model_dump(mode="json") for i in items],
        "users": [u.model_dump(mode="json") for u in users],
    }
    data_str = json.dumps(payload, sort_keys=True)
    return hashlib.md5(data_str.encode()).hexdigest()


class AnalyticsRecomputer:
    """
    Holds the latest report and recomputes it on demand.

    The cached report is keyed by the snapshot fingerprint and the
    evaluation time, since ``evaluated_at`` and undated bookings depend on
    ``now``.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._report: AnalyticsReport | None = None
        self._fingerprint: str | None = None

    @property
    def report(self) -> AnalyticsReport | None:
        return self._report

    @property
    def fingerprint(self) -> str | None:
        return self._fingerprint

    def recompute(
        self,
        bookings: Sequence[Booking],
        items: Sequence[Item],
        users: Sequence[User],
        now: datetime,
    ) -> AnalyticsReport:
        """Unconditionally compute and cache a new report."""
        fingerprint = snapshot_fingerprint(bookings, items, users)
        return self._compute(bookings, items, users, now, fingerprint)

    def refresh(
        self,
        bookings: Sequence[Booking],
        items: Sequence[Item],
        users: Sequence[User],
        now: datetime,
    ) -> AnalyticsReport:
        """
        Return the cached report if the snapshots and ``now`` are unchanged,
        else recompute.
        """
        fingerprint = snapshot_fingerprint(bookings, items, users)
        with self._lock:
            if (
                self._report is not None
                and fingerprint == self._fingerprint
                and now == self._report.evaluated_at
            ):
                increment_counter(reports_computed_total, outcome="unchanged")
                logger.debug("Snapshots unchanged, reusing report", extra={"fingerprint": fingerprint})
                return self._report
        return self._compute(bookings, items, users, now, fingerprint)

    def refresh_from_store(self, store: RecordStore, now: datetime) -> AnalyticsReport:
        """Read current snapshots from the record store and refresh."""
        return self.refresh(store.list_bookings(), store.list_items(), store.list_users(), now)

    def _compute(
        self,
        bookings: Sequence[Booking],
        items: Sequence[Item],
        users: Sequence[User],
        now: datetime,
        fingerprint: str,
    ) -> AnalyticsReport:
        with log_operation(
            "Computing analytics report",
            logger=logger,
            bookings=len(bookings),
            items=len(items),
            users=len(users),
            fingerprint=fingerprint,
        ):
            with track_duration(report_compute_duration_seconds):
                report = compute_report(bookings, items, users, now)

        set_gauge(report_input_records, len(bookings), entity="booking")
        set_gauge(report_input_records, len(items), entity="item")
        set_gauge(report_input_records, len(users), entity="user")
        increment_counter(reports_computed_total, outcome="computed")

        with self._lock:
            self._report = report
            self._fingerprint = fingerprint
        return report
