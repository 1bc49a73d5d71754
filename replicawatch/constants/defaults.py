"""Default values for settings.

All default values used in the WatchSettings model and the CLI.
"""

from pathlib import Path
from typing import Final

from replicawatch.constants.enums import OutputFormat, WorkloadKind

# ============================================================================
# Resource defaults
# ============================================================================

RESOURCE_KIND_DEFAULT: Final = WorkloadKind.DEPLOYMENT

# ============================================================================
# Loop defaults
# ============================================================================

MAX_CONCURRENCY_DEFAULT: Final = 1
MAX_CONCURRENCY_LIMIT: Final = 64

# ============================================================================
# Output / logging defaults
# ============================================================================

OUTPUT_FORMAT_DEFAULT: Final = OutputFormat.TEXT
LOG_LEVEL_DEFAULT: Final = "WARNING"


def default_kubeconfig_path() -> str | None:
    """Return ``~/.kube/config`` when a home directory can be resolved."""
    try:
        home = Path.home()
    except RuntimeError:
        return None
    if not str(home):
        return None
    return str(home / ".kube" / "config")


__all__ = [
    "LOG_LEVEL_DEFAULT",
    "MAX_CONCURRENCY_DEFAULT",
    "MAX_CONCURRENCY_LIMIT",
    "OUTPUT_FORMAT_DEFAULT",
    "RESOURCE_KIND_DEFAULT",
    "default_kubeconfig_path",
]
