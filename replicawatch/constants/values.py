"""Scalar constants for replicawatch."""

from typing import Final

APP_NAME: Final = "replicawatch"
REPLICA_DRIFT_COMMAND: Final = "replicaDrift"

# ============================================================================
# Exit statuses
# ============================================================================

EXIT_OK: Final = 0
EXIT_FAILURE: Final = 1
EXIT_INTERRUPTED: Final = 130

# ============================================================================
# Text report layout
# ============================================================================

REPORT_HEADER_RULE: Final = "-" * 20
REPORT_DIVIDER: Final = "-" * 20

__all__ = [
    "APP_NAME",
    "EXIT_FAILURE",
    "EXIT_INTERRUPTED",
    "EXIT_OK",
    "REPLICA_DRIFT_COMMAND",
    "REPORT_DIVIDER",
    "REPORT_HEADER_RULE",
]
