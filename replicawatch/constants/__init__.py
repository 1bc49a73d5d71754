"""Constants module for replicawatch.

Centralized constants organized by domain:
- enums.py: All Enum class definitions
- values.py: Scalar constants (names, exit statuses, report layout)
- timeouts.py: Timeout values
- defaults.py: Default values for settings
"""

from replicawatch.constants.defaults import (
    LOG_LEVEL_DEFAULT,
    MAX_CONCURRENCY_DEFAULT,
    OUTPUT_FORMAT_DEFAULT,
    RESOURCE_KIND_DEFAULT,
)
from replicawatch.constants.enums import (
    OutcomeStatus,
    OutputFormat,
    SchedulerState,
    WorkloadKind,
)
from replicawatch.constants.timeouts import (
    CLUSTER_REQUEST_TIMEOUT,
    KUBECTL_COMMAND_TIMEOUT,
    POLL_INTERVAL_SECONDS,
)
from replicawatch.constants.values import (
    APP_NAME,
    EXIT_FAILURE,
    EXIT_OK,
    REPLICA_DRIFT_COMMAND,
)

__all__ = [
    "APP_NAME",
    "CLUSTER_REQUEST_TIMEOUT",
    "EXIT_FAILURE",
    "EXIT_OK",
    "KUBECTL_COMMAND_TIMEOUT",
    "LOG_LEVEL_DEFAULT",
    "MAX_CONCURRENCY_DEFAULT",
    "OUTPUT_FORMAT_DEFAULT",
    "POLL_INTERVAL_SECONDS",
    "REPLICA_DRIFT_COMMAND",
    "RESOURCE_KIND_DEFAULT",
    "OutcomeStatus",
    "OutputFormat",
    "SchedulerState",
    "WorkloadKind",
]
