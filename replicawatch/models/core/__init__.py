"""Core domain models."""

from replicawatch.models.core.snapshot_info import (
    FetchOutcome,
    ResourceIdentity,
    Snapshot,
    SweepResult,
)

__all__ = ["FetchOutcome", "ResourceIdentity", "Snapshot", "SweepResult"]
