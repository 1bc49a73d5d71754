"""Cluster controller for replica collection.

This module owns the kubectl connection and drives one sweep at a time:
list namespaces, fetch the watched workload in each namespace, and fold
the per-namespace outcomes into a snapshot.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import os
import re
import subprocess
from collections.abc import Sequence

from replicawatch.constants.enums import OutcomeStatus
from replicawatch.constants.timeouts import (
    CLUSTER_REQUEST_TIMEOUT,
    KUBECTL_COMMAND_TIMEOUT,
    KUBECTL_CONFIG_TIMEOUT,
    KUBECTL_TIMEOUT_MARGIN,
)
from replicawatch.controllers.base import BaseController
from replicawatch.controllers.cluster.fetchers import (
    NamespaceFetcher,
    ResourceFetcher,
)
from replicawatch.errors import (
    FatalConnectionError,
    KubectlError,
    summarize_error,
)
from replicawatch.models.core.snapshot_info import (
    FetchOutcome,
    ResourceIdentity,
    Snapshot,
    SweepResult,
)
from replicawatch.models.state.app_settings import WatchSettings

logger = logging.getLogger(__name__)

_DURATION_PATTERN = re.compile(r"^(?P<amount>\d+)(?P<unit>ms|s|m|h)$")
_DURATION_UNITS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600}


class ClusterController(BaseController):
    """Replica collection across all namespaces of one cluster.

    Delegates to:
    - NamespaceFetcher: namespace enumeration (failure is fatal)
    - ResourceFetcher: per-namespace fetch and outcome classification
    """

    def __init__(
        self,
        resource: ResourceIdentity,
        kubeconfig: str | None = None,
        context: str | None = None,
        request_timeout: str = CLUSTER_REQUEST_TIMEOUT,
        max_concurrency: int = 1,
    ) -> None:
        """Initialize the cluster controller.

        Args:
            resource: Workload to watch in every namespace
            kubeconfig: Optional kubeconfig path passed to kubectl
            context: Optional Kubernetes context name
            request_timeout: kubectl --request-timeout value
            max_concurrency: Namespaces fetched at once (1 = sequential)
        """
        super().__init__()
        self.resource = resource
        self.kubeconfig = kubeconfig
        self.context = context
        self._max_concurrency = max(1, max_concurrency)

        self._namespace_fetcher = NamespaceFetcher(self._run_kubectl, request_timeout)
        self._resource_fetcher = ResourceFetcher(self._run_kubectl, request_timeout)

    @classmethod
    def from_settings(cls, settings: WatchSettings) -> ClusterController:
        return cls(
            resource=settings.resource,
            kubeconfig=settings.kubeconfig,
            context=settings.context,
            request_timeout=settings.request_timeout,
            max_concurrency=settings.max_concurrency,
        )

    # =========================================================================
    # kubectl
    # =========================================================================

    def _base_command(self) -> list[str]:
        cmd = ["kubectl"]
        if self.kubeconfig:
            cmd.extend(["--kubeconfig", self.kubeconfig])
        if self.context:
            cmd.extend(["--context", self.context])
        return cmd

    @staticmethod
    def _request_timeout_seconds(args: tuple[str, ...]) -> int | None:
        """Parse the kubectl --request-timeout value (seconds) from args."""
        prefix = "--request-timeout="
        for part in args:
            if not part.startswith(prefix):
                continue
            match = _DURATION_PATTERN.match(part[len(prefix) :].strip().lower())
            if match is None:
                return None
            seconds = int(match.group("amount")) * _DURATION_UNITS[match.group("unit")]
            return max(1, math.ceil(seconds)) if seconds > 0 else None
        return None

    def _kubectl_timeout_for_args(self, args: tuple[str, ...]) -> int:
        """Process timeout: the request timeout plus headroom, never below the default."""
        request_timeout_seconds = self._request_timeout_seconds(args)
        if request_timeout_seconds is None:
            return KUBECTL_COMMAND_TIMEOUT
        return max(KUBECTL_COMMAND_TIMEOUT, request_timeout_seconds + KUBECTL_TIMEOUT_MARGIN)

    def _run_kubectl_sync(
        self,
        args: tuple[str, ...],
        timeout: int | None = None,
    ) -> str:
        """Run a kubectl command synchronously (thread-safe wrapper target)."""
        cmd = [*self._base_command(), *args]
        effective_timeout = timeout if timeout is not None else self._kubectl_timeout_for_args(args)
        result = subprocess.run(
            cmd, capture_output=True, text=True, timeout=effective_timeout
        )
        if result.returncode != 0:
            raise KubectlError(args, result.stderr, result.returncode)
        return result.stdout

    async def _run_kubectl(self, args: tuple[str, ...]) -> str:
        return await asyncio.to_thread(self._run_kubectl_sync, args)

    # =========================================================================
    # Connection
    # =========================================================================

    async def check_connection(self) -> bool:
        """Verify kubectl and the kubeconfig resolve to a usable context.

        Only the client configuration is checked; the API server is first
        contacted by the namespace listing.

        Raises:
            FatalConnectionError: If kubectl or the kubeconfig are unusable.
        """
        if self.kubeconfig and not os.path.isfile(self.kubeconfig):
            raise FatalConnectionError(f"kubeconfig not found: {self.kubeconfig}")

        try:
            output = await asyncio.to_thread(
                self._run_kubectl_sync,
                ("config", "view", "--minify", "-o", "json"),
                KUBECTL_CONFIG_TIMEOUT,
            )
        except FileNotFoundError as exc:
            raise FatalConnectionError("kubectl executable not found on PATH") from exc
        except subprocess.TimeoutExpired as exc:
            raise FatalConnectionError("timed out loading cluster configuration") from exc
        except (KubectlError, OSError) as exc:
            raise FatalConnectionError(
                f"cannot load cluster configuration: {summarize_error(exc)}"
            ) from exc

        try:
            config = json.loads(output)
        except json.JSONDecodeError as exc:
            raise FatalConnectionError("cannot parse cluster configuration") from exc

        contexts = config.get("contexts") if isinstance(config, dict) else None
        if not contexts:
            raise FatalConnectionError("no usable context in cluster configuration")

        logger.info(
            "Using context %s",
            self.context or config.get("current-context") or contexts[0].get("name"),
        )
        return True

    # =========================================================================
    # Collection
    # =========================================================================

    async def list_namespaces(self) -> list[str]:
        """List every namespace (raises FatalEnumerationError on failure)."""
        return await self._namespace_fetcher.list_namespaces()

    async def fetch(self, namespace: str) -> FetchOutcome:
        """Fetch the watched resource in one namespace; never raises."""
        try:
            return await self._resource_fetcher.fetch(namespace, self.resource)
        except Exception as exc:
            logger.debug("Fetch raised for namespace %s", namespace, exc_info=True)
            return FetchOutcome.failed(namespace, summarize_error(exc))

    async def _fetch_outcomes(self, namespaces: Sequence[str]) -> list[FetchOutcome]:
        """Fetch every namespace; outcomes keep enumeration order."""
        if self._max_concurrency == 1 or len(namespaces) <= 1:
            outcomes: list[FetchOutcome] = []
            for namespace in namespaces:
                outcomes.append(await self.fetch(namespace))
            return outcomes

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _fetch_namespace(namespace: str) -> FetchOutcome:
            async with semaphore:
                return await self.fetch(namespace)

        tasks = [asyncio.create_task(_fetch_namespace(namespace)) for namespace in namespaces]
        try:
            return list(await asyncio.gather(*tasks))
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)

    @staticmethod
    def fold(outcomes: Sequence[FetchOutcome]) -> dict[str, int]:
        """Fold outcomes into namespace -> replicas.

        The last outcome seen for a namespace decides whether and with which
        count it appears; only FOUND outcomes produce entries.
        """
        latest: dict[str, FetchOutcome] = {}
        for outcome in outcomes:
            latest[outcome.namespace] = outcome
        return {
            namespace: outcome.replicas
            for namespace, outcome in latest.items()
            if outcome.is_found and outcome.replicas is not None
        }

    async def sweep(self, namespaces: Sequence[str], cycle: int = 0) -> SweepResult:
        """Fetch the watched resource in every namespace and build a snapshot.

        Always completes: per-namespace failures are recorded as ERROR
        outcomes and left out of the snapshot.
        """
        self._start_load_timer()
        outcomes = await self._fetch_outcomes(namespaces)

        for outcome in outcomes:
            if outcome.status is OutcomeStatus.NOT_FOUND:
                logger.debug(
                    "%s not found in namespace %s",
                    self.resource.display,
                    outcome.namespace,
                )
            elif outcome.status is OutcomeStatus.ERROR:
                logger.warning(
                    "Fetching %s in namespace %s failed: %s",
                    self.resource.display,
                    outcome.namespace,
                    outcome.error,
                )

        snapshot = Snapshot(resource=self.resource, cycle=cycle, replicas=self.fold(outcomes))
        result = SweepResult(
            snapshot=snapshot,
            outcomes=outcomes,
            duration_ms=self._elapsed_ms(),
        )
        logger.info(
            "Cycle %d: %d namespaces, %d found, %d not found, %d errors (%.0f ms)",
            cycle,
            len(namespaces),
            len(snapshot.replicas),
            len(result.not_found_namespaces()),
            len(result.error_outcomes()),
            result.duration_ms,
        )
        return result

    async def collect(self, cycle: int = 0) -> SweepResult:
        """List namespaces then sweep them.

        Raises:
            FatalEnumerationError: If the namespace list cannot be retrieved.
        """
        namespaces = await self.list_namespaces()
        return await self.sweep(namespaces, cycle=cycle)
