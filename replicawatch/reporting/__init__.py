"""Snapshot reporting."""

from replicawatch.reporting.snapshot_reporter import (
    KeyValueSnapshotReporter,
    TableSnapshotReporter,
    TextSnapshotReporter,
    build_reporter,
)

__all__ = [
    "KeyValueSnapshotReporter",
    "TableSnapshotReporter",
    "TextSnapshotReporter",
    "build_reporter",
]
