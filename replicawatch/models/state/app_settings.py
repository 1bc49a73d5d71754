"""Application settings models."""

import logging
import os
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from replicawatch.constants.defaults import (
    LOG_LEVEL_DEFAULT,
    MAX_CONCURRENCY_DEFAULT,
    MAX_CONCURRENCY_LIMIT,
    OUTPUT_FORMAT_DEFAULT,
    default_kubeconfig_path,
)
from replicawatch.constants.enums import OutputFormat
from replicawatch.constants.timeouts import (
    CLUSTER_REQUEST_TIMEOUT,
    POLL_INTERVAL_SECONDS,
)
from replicawatch.models.core.snapshot_info import ResourceIdentity

_KUBECTL_DURATION = re.compile(r"^\d+(ms|s|m|h)$")


class WatchSettings(BaseModel):
    """Immutable run configuration, built once at startup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Tracked workload
    resource: ResourceIdentity

    # Cluster access
    kubeconfig: str | None = Field(default_factory=default_kubeconfig_path)
    context: str | None = None
    request_timeout: str = CLUSTER_REQUEST_TIMEOUT

    # Polling loop
    poll_interval_seconds: float = Field(default=POLL_INTERVAL_SECONDS, gt=0)
    max_concurrency: int = Field(
        default=MAX_CONCURRENCY_DEFAULT, ge=1, le=MAX_CONCURRENCY_LIMIT
    )
    max_cycles: int | None = Field(default=None, ge=1)

    # Output
    output_format: OutputFormat = OUTPUT_FORMAT_DEFAULT
    log_level: str = LOG_LEVEL_DEFAULT

    @field_validator("request_timeout")
    @classmethod
    def _check_request_timeout(cls, value: str) -> str:
        value = value.strip()
        if not _KUBECTL_DURATION.match(value):
            raise ValueError(
                f"request_timeout must be a kubectl duration such as '30s', got {value!r}"
            )
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level

    @field_validator("kubeconfig", "context")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("kubeconfig")
    @classmethod
    def _expand_kubeconfig(cls, value: str | None) -> str | None:
        return os.path.expanduser(value) if value else value


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when settings fail to load."""
