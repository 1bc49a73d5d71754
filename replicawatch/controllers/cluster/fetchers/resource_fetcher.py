"""Resource fetcher for cluster controller - fetches one named workload per namespace."""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Any

from replicawatch.constants.timeouts import CLUSTER_REQUEST_TIMEOUT
from replicawatch.controllers.cluster.parsers.workload_parser import (
    MalformedWorkloadError,
    WorkloadParser,
)
from replicawatch.errors import KubectlError, summarize_error
from replicawatch.models.core.snapshot_info import FetchOutcome, ResourceIdentity

logger = logging.getLogger(__name__)


class ResourceFetcher:
    """Fetches a named workload in a namespace and classifies the outcome.

    ``fetch`` never raises for per-namespace problems: a missing workload
    is NOT_FOUND and every other failure, including unrecognized exception
    types, is an ERROR outcome for that namespace only.
    """

    def __init__(
        self,
        run_kubectl_func: Any,
        request_timeout: str = CLUSTER_REQUEST_TIMEOUT,
        parser: WorkloadParser | None = None,
    ) -> None:
        """Initialize with kubectl runner function.

        Args:
            run_kubectl_func: Async function to run kubectl commands
            request_timeout: kubectl --request-timeout value
            parser: Parser used to read the replica count
        """
        self._run_kubectl = run_kubectl_func
        self._request_timeout = request_timeout
        self._parser = parser or WorkloadParser()

    def _build_args(self, namespace: str, identity: ResourceIdentity) -> tuple[str, ...]:
        return (
            "get",
            identity.kind.value,
            identity.name,
            "-n",
            namespace,
            "-o",
            "json",
            f"--request-timeout={self._request_timeout}",
        )

    async def fetch(self, namespace: str, identity: ResourceIdentity) -> FetchOutcome:
        """Fetch ``identity`` in ``namespace``.

        Returns:
            FOUND with the observed replica count, NOT_FOUND, or ERROR.
        """
        try:
            output = await self._run_kubectl(self._build_args(namespace, identity))
        except KubectlError as exc:
            if exc.is_not_found:
                return FetchOutcome.not_found(namespace)
            return FetchOutcome.failed(namespace, _describe_kubectl_error(exc))
        except subprocess.TimeoutExpired:
            return FetchOutcome.failed(namespace, "kubectl command timed out")
        except Exception as exc:
            logger.debug("Unclassified fetch error in %s", namespace, exc_info=True)
            return FetchOutcome.failed(
                namespace, f"{type(exc).__name__}: {summarize_error(exc)}"
            )

        try:
            workload = json.loads(output)
            replicas = self._parser.observed_replicas(workload, identity.kind)
        except (json.JSONDecodeError, TypeError):
            return FetchOutcome.failed(namespace, "malformed response: invalid JSON")
        except MalformedWorkloadError as exc:
            return FetchOutcome.failed(namespace, f"malformed response: {exc}")

        return FetchOutcome.found(namespace, replicas)


def _describe_kubectl_error(error: KubectlError) -> str:
    message = summarize_error(error)
    if error.reason and error.reason not in message:
        return f"{error.reason}: {message}"
    return message
