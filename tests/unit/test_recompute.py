"""
Unit tests for the report recomputation trigger.
"""

from datetime import datetime, timedelta, timezone

import pytest

from agrirent.analytics import AnalyticsRecomputer, compute_report, snapshot_fingerprint
from agrirent.observability.metrics import get_sample_value
from agrirent.store import InMemoryRecordStore


def computed_count() -> float:
    return get_sample_value("agrirent_reports_computed_total", {"outcome": "computed"}) or 0


def unchanged_count() -> float:
    return get_sample_value("agrirent_reports_computed_total", {"outcome": "unchanged"}) or 0


@pytest.mark.unit
class TestSnapshotFingerprint:

    def test_stable_for_equal_snapshots(self, sample_bookings, sample_items, sample_users):
        first = snapshot_fingerprint(sample_bookings, sample_items, sample_users)
        second = snapshot_fingerprint(list(sample_bookings), list(sample_items), list(sample_users))
        assert first == second
        assert len(first) == 32

    def test_order_sensitive(self, sample_bookings, sample_items, sample_users):
        reordered = list(reversed(sample_bookings))
        assert snapshot_fingerprint(sample_bookings, sample_items, sample_users) != snapshot_fingerprint(
            reordered, sample_items, sample_users
        )

    def test_content_sensitive(self, sample_bookings, sample_items, sample_users, booking_factory):
        changed = [*sample_bookings, booking_factory(99)]
        assert snapshot_fingerprint(sample_bookings, sample_items, sample_users) != snapshot_fingerprint(
            changed, sample_items, sample_users
        )


@pytest.mark.unit
class TestAnalyticsRecomputer:
    """Tests for caching and explicit recomputation"""

    def test_starts_empty(self):
        recomputer = AnalyticsRecomputer()
        assert recomputer.report is None
        assert recomputer.fingerprint is None

    def test_recompute_matches_engine(self, sample_bookings, sample_items, sample_users, fixed_now):
        recomputer = AnalyticsRecomputer()
        report = recomputer.recompute(sample_bookings, sample_items, sample_users, fixed_now)

        assert report == compute_report(sample_bookings, sample_items, sample_users, fixed_now)
        assert recomputer.report is report
        assert recomputer.fingerprint == snapshot_fingerprint(sample_bookings, sample_items, sample_users)

    def test_refresh_reuses_report_for_unchanged_snapshots(
        self, sample_bookings, sample_items, sample_users, fixed_now
    ):
        recomputer = AnalyticsRecomputer()
        first = recomputer.refresh(sample_bookings, sample_items, sample_users, fixed_now)
        computed, unchanged = computed_count(), unchanged_count()

        second = recomputer.refresh(sample_bookings, sample_items, sample_users, fixed_now)

        assert second is first
        assert computed_count() == computed
        assert unchanged_count() == unchanged + 1

    def test_refresh_recomputes_for_new_evaluation_time(self, booking_factory):
        bookings = [booking_factory(1, itemCategory="Tractors", date=None)]
        september = datetime(2025, 9, 15, tzinfo=timezone.utc)
        july = datetime(2025, 7, 15, tzinfo=timezone.utc)
        recomputer = AnalyticsRecomputer()

        first = recomputer.refresh(bookings, [], [], september)
        second = recomputer.refresh(bookings, [], [], july)

        assert second is not first
        assert second.evaluated_at == july
        assert [(m.month, m.tractors) for m in second.seasonal_signals.rainy] == [(6, 0), (7, 1), (8, 0)]
        assert [m.tractors for m in second.seasonal_signals.harvest] == [0, 0, 0]
        assert recomputer.refresh(bookings, [], [], july) is second

    def test_refresh_after_later_time_is_not_reused(
        self, sample_bookings, sample_items, sample_users, fixed_now
    ):
        recomputer = AnalyticsRecomputer()
        first = recomputer.refresh(sample_bookings, sample_items, sample_users, fixed_now)
        later = recomputer.refresh(sample_bookings, sample_items, sample_users, fixed_now + timedelta(days=90))

        assert later is not first
        assert later.evaluated_at == fixed_now + timedelta(days=90)

    def test_refresh_recomputes_on_change(
        self, sample_bookings, sample_items, sample_users, fixed_now, booking_factory
    ):
        recomputer = AnalyticsRecomputer()
        first = recomputer.refresh(sample_bookings, sample_items, sample_users, fixed_now)
        computed = computed_count()

        more = [*sample_bookings, booking_factory(7, status="Completed", finalPrice=500)]
        second = recomputer.refresh(more, sample_items, sample_users, fixed_now)

        assert second is not first
        assert second.total_revenue == first.total_revenue + 500
        assert computed_count() == computed + 1

    def test_recompute_always_computes(self, sample_bookings, sample_items, sample_users, fixed_now):
        recomputer = AnalyticsRecomputer()
        first = recomputer.recompute(sample_bookings, sample_items, sample_users, fixed_now)
        second = recomputer.recompute(sample_bookings, sample_items, sample_users, fixed_now)

        assert second == first
        assert second is not first

    def test_refresh_from_store(self, sample_bookings, sample_items, sample_users, fixed_now, booking_factory):
        store = InMemoryRecordStore(bookings=sample_bookings, items=sample_items, users=sample_users)
        recomputer = AnalyticsRecomputer()

        first = recomputer.refresh_from_store(store, fixed_now)
        assert first.total_completed_bookings == 3
        assert recomputer.refresh_from_store(store, fixed_now) is first

        store.add_bookings([booking_factory(50, status="Completed", finalPrice=100)])
        updated = recomputer.refresh_from_store(store, fixed_now)
        assert updated.total_completed_bookings == 4

    def test_metrics_recorded(self, sample_bookings, sample_items, sample_users, fixed_now):
        durations = get_sample_value("agrirent_report_compute_duration_seconds_count") or 0

        AnalyticsRecomputer().recompute(sample_bookings, sample_items, sample_users, fixed_now)

        assert get_sample_value("agrirent_report_compute_duration_seconds_count") == durations + 1
        assert get_sample_value("agrirent_report_input_records", {"entity": "booking"}) == len(sample_bookings)
        assert get_sample_value("agrirent_report_input_records", {"entity": "user"}) == len(sample_users)
