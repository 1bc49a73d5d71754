"""Resource identity, per-namespace fetch outcome and snapshot models."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from replicawatch.constants.defaults import RESOURCE_KIND_DEFAULT
from replicawatch.constants.enums import OutcomeStatus, WorkloadKind


class ResourceIdentity(BaseModel):
    """(kind, name) of the workload being watched."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: WorkloadKind = RESOURCE_KIND_DEFAULT
    name: str

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("resource name must not be empty")
        return name

    @property
    def display(self) -> str:
        return f"{self.kind.value}/{self.name}"


class FetchOutcome(BaseModel):
    """Result of fetching the watched resource in one namespace.

    Exactly one of FOUND (with ``replicas``), NOT_FOUND, or ERROR (with
    ``error``) applies.
    """

    model_config = ConfigDict(frozen=True)

    namespace: str
    status: OutcomeStatus
    replicas: int | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _check_variant(self) -> FetchOutcome:
        if self.status is OutcomeStatus.FOUND:
            if self.replicas is None or self.error is not None:
                raise ValueError("FOUND outcome requires replicas and no error")
        elif self.status is OutcomeStatus.NOT_FOUND:
            if self.replicas is not None or self.error is not None:
                raise ValueError("NOT_FOUND outcome carries no replicas or error")
        elif self.replicas is not None or not self.error:
            raise ValueError("ERROR outcome requires an error and no replicas")
        return self

    @classmethod
    def found(cls, namespace: str, replicas: int) -> FetchOutcome:
        return cls(namespace=namespace, status=OutcomeStatus.FOUND, replicas=replicas)

    @classmethod
    def not_found(cls, namespace: str) -> FetchOutcome:
        return cls(namespace=namespace, status=OutcomeStatus.NOT_FOUND)

    @classmethod
    def failed(cls, namespace: str, cause: str) -> FetchOutcome:
        return cls(
            namespace=namespace,
            status=OutcomeStatus.ERROR,
            error=cause or "unknown error",
        )

    @property
    def is_found(self) -> bool:
        return self.status is OutcomeStatus.FOUND


class Snapshot(BaseModel):
    """One cycle's namespace -> observed replica count mapping."""

    resource: ResourceIdentity
    cycle: int = 0
    taken_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    replicas: dict[str, int] = Field(default_factory=dict)

    def namespaces(self) -> list[str]:
        """Namespaces present in the snapshot, sorted."""
        return sorted(self.replicas)


class SweepResult(BaseModel):
    """Snapshot plus every per-namespace outcome of the sweep, in visit order."""

    snapshot: Snapshot
    outcomes: list[FetchOutcome] = Field(default_factory=list)
    duration_ms: float = 0.0

    def not_found_namespaces(self) -> list[str]:
        return [
            outcome.namespace
            for outcome in self.outcomes
            if outcome.status is OutcomeStatus.NOT_FOUND
        ]

    def error_outcomes(self) -> list[FetchOutcome]:
        return [
            outcome for outcome in self.outcomes if outcome.status is OutcomeStatus.ERROR
        ]


__all__ = [
    "FetchOutcome",
    "ResourceIdentity",
    "Snapshot",
    "SweepResult",
]
