"""Tests for the exception hierarchy and error summaries."""

from __future__ import annotations

import pytest

from replicawatch.errors import (
    FatalConnectionError,
    FatalEnumerationError,
    FatalError,
    KubectlError,
    ReplicaWatchError,
    parse_api_reason,
    summarize_error,
)


class TestParseApiReason:
    """Tests for parse_api_reason."""

    @pytest.mark.parametrize(
        ("stderr", "expected"),
        [
            ('Error from server (NotFound): deployments.apps "api" not found', "NotFound"),
            ("Error from server (Forbidden): namespaces is forbidden", "Forbidden"),
            ("Unable to connect to the server: dial tcp: i/o timeout", None),
            ("", None),
        ],
    )
    def test_reason(self, stderr: str, expected: str | None) -> None:
        assert parse_api_reason(stderr) == expected


class TestKubectlError:
    """Tests for KubectlError."""

    def test_attributes(self) -> None:
        error = KubectlError(
            ["get", "deployment", "api"],
            'Error from server (NotFound): deployments.apps "api" not found\n',
            1,
        )

        assert error.command_args == ("get", "deployment", "api")
        assert error.returncode == 1
        assert error.reason == "NotFound"
        assert error.is_not_found is True
        assert str(error).endswith("not found")

    def test_forbidden_is_not_not_found(self) -> None:
        error = KubectlError(("get",), "Error from server (Forbidden): nope", 1)
        assert error.is_not_found is False

    def test_empty_stderr(self) -> None:
        error = KubectlError(("get",), "", 1)
        assert str(error) == "kubectl command failed"
        assert error.reason is None


class TestHierarchy:
    """Fatal errors and runner errors share the package base."""

    @pytest.mark.parametrize("cls", [FatalConnectionError, FatalEnumerationError])
    def test_fatal_subclasses(self, cls: type[Exception]) -> None:
        assert issubclass(cls, FatalError)
        assert issubclass(cls, ReplicaWatchError)

    def test_kubectl_error_is_not_fatal(self) -> None:
        assert not issubclass(KubectlError, FatalError)


class TestSummarizeError:
    """Tests for summarize_error."""

    def test_prefers_server_error_line(self) -> None:
        error = RuntimeError(
            "I1018 12:00:00 loader.go:395] Config loaded\n"
            "Error from server (Forbidden): deployments.apps is forbidden"
        )
        assert summarize_error(error) == "Error from server (Forbidden): deployments.apps is forbidden"

    def test_strips_error_prefix(self) -> None:
        assert summarize_error(RuntimeError("error: context \"x\" does not exist")) == (
            'context "x" does not exist'
        )

    def test_empty_message_uses_type_name(self) -> None:
        assert summarize_error(ValueError()) == "ValueError"

    def test_truncates(self) -> None:
        summary = summarize_error(RuntimeError("x" * 500), limit=40)
        assert len(summary) == 40
        assert summary.endswith("...")
