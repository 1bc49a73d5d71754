"""Enum definitions shared across replicawatch."""

from enum import Enum

# =============================================================================
# Workload Enums
# =============================================================================


class WorkloadKind(str, Enum):
    """Namespaced workload kinds that report a replica count."""

    DEPLOYMENT = "deployment"
    STATEFULSET = "statefulset"
    REPLICASET = "replicaset"
    DAEMONSET = "daemonset"

    @property
    def api_kind(self) -> str:
        """Kind name as it appears in the object's ``kind`` field."""
        return _API_KINDS[self]


_API_KINDS = {
    WorkloadKind.DEPLOYMENT: "Deployment",
    WorkloadKind.STATEFULSET: "StatefulSet",
    WorkloadKind.REPLICASET: "ReplicaSet",
    WorkloadKind.DAEMONSET: "DaemonSet",
}


# =============================================================================
# Fetch Enums
# =============================================================================


class OutcomeStatus(str, Enum):
    """Classification of one namespace fetch."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


# =============================================================================
# Scheduler Enums
# =============================================================================


class SchedulerState(Enum):
    """Poll scheduler lifecycle states."""

    IDLE = "idle"  # constructed, not started
    RUNNING = "running"
    HALTED = "halted"  # fatal error, terminal
    STOPPED = "stopped"  # graceful stop, terminal


# =============================================================================
# Output Enums
# =============================================================================


class OutputFormat(str, Enum):
    """Snapshot report formats."""

    TEXT = "text"
    KV = "kv"
    TABLE = "table"


__all__ = [
    "OutcomeStatus",
    "OutputFormat",
    "SchedulerState",
    "WorkloadKind",
]
