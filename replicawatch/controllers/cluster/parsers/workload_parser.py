"""Workload parser for cluster controller - extracts observed replica counts."""

from __future__ import annotations

from typing import Any

from replicawatch.constants.enums import WorkloadKind


class MalformedWorkloadError(ValueError):
    """Raised when a workload document does not have the expected shape."""


class WorkloadParser:
    """Parses workload objects returned by ``kubectl get -o json``."""

    # Status field holding the observed replica count, per kind
    _REPLICA_STATUS_FIELDS = {
        WorkloadKind.DEPLOYMENT: "replicas",
        WorkloadKind.STATEFULSET: "replicas",
        WorkloadKind.REPLICASET: "replicas",
        WorkloadKind.DAEMONSET: "currentNumberScheduled",
    }

    def observed_replicas(self, workload: Any, kind: WorkloadKind) -> int:
        """Return the replica count reported in the workload's status.

        The API server omits zero-valued integer fields, so a missing status
        or missing count is read as zero.

        Args:
            workload: Decoded workload object
            kind: Expected workload kind

        Returns:
            Observed replica count.

        Raises:
            MalformedWorkloadError: If the document is not the expected kind
                or the count is not a non-negative integer.
        """
        if not isinstance(workload, dict):
            raise MalformedWorkloadError("workload document is not an object")

        reported_kind = workload.get("kind")
        if reported_kind is not None and reported_kind != kind.api_kind:
            raise MalformedWorkloadError(
                f"expected kind {kind.api_kind}, got {reported_kind}"
            )

        status = workload.get("status") or {}
        if not isinstance(status, dict):
            raise MalformedWorkloadError("workload status is not an object")

        field_name = self._REPLICA_STATUS_FIELDS[kind]
        value = status.get(field_name, 0)
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise MalformedWorkloadError(
                f"status.{field_name} is not a non-negative integer: {value!r}"
            )
        return value
