"""Exception hierarchy for replicawatch.

Two tiers:
- FatalError subclasses unwind to the CLI and terminate the process.
- KubectlError is raised by the kubectl runner; per-namespace fetches turn it
  into an ERROR or NOT_FOUND outcome instead of letting it escape a sweep.
"""

from __future__ import annotations

import re

_REASON_PATTERN = re.compile(r"Error from server \((?P<reason>[A-Za-z]+)\)")


class ReplicaWatchError(Exception):
    """Base exception for replicawatch."""


class KubectlError(ReplicaWatchError):
    """kubectl exited with a non-zero status."""

    def __init__(
        self,
        args: tuple[str, ...],
        stderr: str,
        returncode: int | None = None,
    ) -> None:
        self.command_args = tuple(args)
        self.stderr = (stderr or "").strip()
        self.returncode = returncode
        self.reason = parse_api_reason(self.stderr)
        super().__init__(self.stderr or "kubectl command failed")

    @property
    def is_not_found(self) -> bool:
        """True when the API server answered with the NotFound reason."""
        return self.reason == "NotFound"


class FatalError(ReplicaWatchError):
    """Unrecoverable error; the process must stop."""


class FatalConnectionError(FatalError):
    """Cluster credentials or connection setup failed at startup."""


class FatalEnumerationError(FatalError):
    """The namespace list could not be retrieved."""


def parse_api_reason(stderr: str) -> str | None:
    """Extract the API status reason from kubectl stderr.

    kubectl renders API errors as ``Error from server (Reason): message``.
    """
    match = _REASON_PATTERN.search(stderr or "")
    if match is None:
        return None
    return match.group("reason")


def summarize_error(error: BaseException, limit: int = 160) -> str:
    """Return a concise single-line description of ``error``."""
    raw_message = str(error).strip()
    if not raw_message:
        return type(error).__name__

    lines = [line.strip() for line in raw_message.splitlines() if line.strip()]
    selected_line = lines[-1]
    for line in reversed(lines):
        if line.startswith(("error:", "Error from server")):
            selected_line = line
            break

    cleaned = selected_line.removeprefix("error:").strip()
    if len(cleaned) > limit:
        return f"{cleaned[: limit - 3].rstrip()}..."
    return cleaned or type(error).__name__


__all__ = [
    "FatalConnectionError",
    "FatalEnumerationError",
    "FatalError",
    "KubectlError",
    "ReplicaWatchError",
    "parse_api_reason",
    "summarize_error",
]
