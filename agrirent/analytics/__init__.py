"""
Analytics aggregation engine and its recomputation trigger.
"""

from .engine import AnalyticsEngine, compute_report
from .recompute import AnalyticsRecomputer, snapshot_fingerprint

__all__ = [
    "AnalyticsEngine",
    "AnalyticsRecomputer",
    "compute_report",
    "snapshot_fingerprint",
]
