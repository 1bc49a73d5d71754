"""Timeout constants.

All timeout and interval values for kubectl requests and the polling loop.
"""

from typing import Final

# ============================================================================
# API/Cluster timeouts (string format for kubectl)
# ============================================================================

CLUSTER_REQUEST_TIMEOUT: Final = "30s"

# Process-level command timeouts (must be greater than request timeout)
KUBECTL_COMMAND_TIMEOUT: Final = 45
KUBECTL_CONFIG_TIMEOUT: Final = 8
# Headroom added on top of --request-timeout for the process timeout
KUBECTL_TIMEOUT_MARGIN: Final = 10

# ============================================================================
# Polling loop (float, in seconds)
# ============================================================================

POLL_INTERVAL_SECONDS: Final = 10.0

__all__ = [
    "CLUSTER_REQUEST_TIMEOUT",
    "KUBECTL_COMMAND_TIMEOUT",
    "KUBECTL_CONFIG_TIMEOUT",
    "KUBECTL_TIMEOUT_MARGIN",
    "POLL_INTERVAL_SECONDS",
]
