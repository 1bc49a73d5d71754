"""Namespace fetcher for cluster controller - lists every namespace in the cluster."""

from __future__ import annotations

import json
import logging
from typing import Any

from replicawatch.constants.timeouts import CLUSTER_REQUEST_TIMEOUT
from replicawatch.errors import FatalEnumerationError, summarize_error

logger = logging.getLogger(__name__)


class NamespaceFetcher:
    """Fetches namespace names from the Kubernetes cluster."""

    def __init__(
        self,
        run_kubectl_func: Any,
        request_timeout: str = CLUSTER_REQUEST_TIMEOUT,
    ) -> None:
        """Initialize with kubectl runner function.

        Args:
            run_kubectl_func: Async function to run kubectl commands
            request_timeout: kubectl --request-timeout value
        """
        self._run_kubectl = run_kubectl_func
        self._request_timeout = request_timeout

    def _build_args(self) -> tuple[str, ...]:
        return (
            "get",
            "namespaces",
            "-o",
            "json",
            f"--request-timeout={self._request_timeout}",
        )

    async def list_namespaces(self) -> list[str]:
        """Fetch all namespace names visible to the caller.

        Returns:
            Sorted, de-duplicated namespace names.

        Raises:
            FatalEnumerationError: If the list cannot be retrieved or decoded.
                A partial list is never returned.
        """
        try:
            output = await self._run_kubectl(self._build_args())
        except Exception as exc:
            raise FatalEnumerationError(
                f"cannot list namespaces: {summarize_error(exc)}"
            ) from exc

        try:
            data = json.loads(output)
        except (json.JSONDecodeError, TypeError) as exc:
            raise FatalEnumerationError("cannot list namespaces: invalid JSON response") from exc

        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise FatalEnumerationError("cannot list namespaces: response has no items")

        names: set[str] = set()
        for item in items:
            metadata = item.get("metadata") if isinstance(item, dict) else None
            if not isinstance(metadata, dict):
                raise FatalEnumerationError(
                    "cannot list namespaces: malformed namespace item in response"
                )
            names.add(str(metadata.get("name") or "").strip())
        namespaces = sorted(name for name in names if name)
        logger.debug("Listed %d namespaces", len(namespaces))
        return namespaces
