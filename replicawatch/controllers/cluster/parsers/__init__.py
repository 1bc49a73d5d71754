"""Parsers for cluster controller."""

from replicawatch.controllers.cluster.parsers.workload_parser import (
    MalformedWorkloadError,
    WorkloadParser,
)

__all__ = ["MalformedWorkloadError", "WorkloadParser"]
