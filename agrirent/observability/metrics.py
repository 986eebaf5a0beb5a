"""
Prometheus metrics for agrirent

Instruments report recomputation, snapshot loading and change-feed
reconciliation. All metrics live in a private registry so importing this
module never touches the global default registry.
"""
import os
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# ANALYTICS METRICS
# =======================

reports_computed_total = Counter(
    name="agrirent_reports_computed_total",
    documentation="Analytics reports computed, by trigger outcome",
    labelnames=["outcome"],  # outcome: computed, unchanged
    registry=REGISTRY,
)

report_compute_duration_seconds = Histogram(
    name="agrirent_report_compute_duration_seconds",
    documentation="Time spent computing an analytics report in seconds",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY,
)

report_input_records = Gauge(
    name="agrirent_report_input_records",
    documentation="Number of snapshot records fed into the last report",
    labelnames=["entity"],  # entity: booking, item, user
    registry=REGISTRY,
)

# =======================
# SNAPSHOT METRICS
# =======================

snapshot_records_total = Counter(
    name="agrirent_snapshot_records_total",
    documentation="Snapshot rows read from the record source",
    labelnames=["entity", "status"],  # status: loaded, rejected
    registry=REGISTRY,
)

# =======================
# CHANGE FEED METRICS
# =======================

feed_events_applied_total = Counter(
    name="agrirent_feed_events_applied_total",
    documentation="Change-feed events applied to the reconciled collection",
    labelnames=["operation"],  # operation: insert, replace
    registry=REGISTRY,
)

feed_events_skipped_total = Counter(
    name="agrirent_feed_events_skipped_total",
    documentation="Change-feed messages that were not applied",
    labelnames=["reason"],  # reason: delete, malformed
    registry=REGISTRY,
)

feed_delivery_failures_total = Counter(
    name="agrirent_feed_delivery_failures_total",
    documentation="Delivery failures reported by the change-feed source",
    registry=REGISTRY,
)

reconciled_submissions = Gauge(
    name="agrirent_reconciled_submissions",
    documentation="Submissions currently held by the reconciler",
    registry=REGISTRY,
)

feed_stale = Gauge(
    name="agrirent_feed_stale",
    documentation="Whether the reconciled view is stale after a feed failure (1) or not (0)",
    registry=REGISTRY,
)

# =======================
# KYC ADMIN METRICS
# =======================

kyc_admin_actions_total = Counter(
    name="agrirent_kyc_admin_actions_total",
    documentation="KYC admin actions passed through to the record source",
    labelnames=["action", "status"],  # status: applied, skipped
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Imported lazily so that importing metrics never binds a port
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(report_compute_duration_seconds):
            ...
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        target = self.histogram.labels(**self.labels) if self.labels else self.histogram
        self.timer = target.time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    target = counter.labels(**labels) if labels else counter
    target.inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    target = gauge.labels(**labels) if labels else gauge
    target.set(value)


def get_sample_value(name: str, labels: dict[str, str] | None = None) -> float | None:
    """Current value of a sample in the agrirent registry (None if never set)."""
    return REGISTRY.get_sample_value(name, labels or {})
