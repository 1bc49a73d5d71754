"""Tests for cluster controller."""

from __future__ import annotations

import json
import subprocess
import threading
import time
from typing import Any

import pytest

from replicawatch.constants.enums import OutcomeStatus, OutputFormat
from replicawatch.controllers.cluster.controller import ClusterController
from replicawatch.errors import (
    FatalConnectionError,
    FatalEnumerationError,
    KubectlError,
)
from replicawatch.models.core.snapshot_info import FetchOutcome, ResourceIdentity
from replicawatch.models.state.app_settings import WatchSettings

API = ResourceIdentity(name="api")

NOT_FOUND = 'Error from server (NotFound): deployments.apps "api" not found'
FORBIDDEN = (
    'Error from server (Forbidden): deployments.apps "api" is forbidden: '
    'User "dev" cannot get resource "deployments" in API group "apps"'
)


def _deployment(replicas: int | None) -> str:
    status = {} if replicas is None else {"replicas": replicas}
    return json.dumps({"kind": "Deployment", "metadata": {"name": "api"}, "status": status})


class FakeKubectl:
    """Stands in for ClusterController._run_kubectl_sync.

    ``responses`` maps namespace -> payload string, or an exception to raise.
    """

    def __init__(
        self,
        namespaces: list[str] | Exception,
        responses: dict[str, Any] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.namespaces = namespaces
        self.responses = responses or {}
        self.delay = delay
        self.calls: list[tuple[str, ...]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def __call__(self, args: tuple[str, ...], timeout: int | None = None) -> str:
        self.calls.append(args)
        if args[:2] == ("get", "namespaces"):
            if isinstance(self.namespaces, Exception):
                raise self.namespaces
            return json.dumps(
                {"items": [{"metadata": {"name": name}} for name in self.namespaces]}
            )

        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            namespace = args[args.index("-n") + 1]
            response = self.responses.get(namespace)
            if response is None:
                raise KubectlError(args, NOT_FOUND, returncode=1)
            if isinstance(response, BaseException):
                raise response
            return response
        finally:
            with self._lock:
                self.in_flight -= 1

    def fetched_namespaces(self) -> list[str]:
        return [args[args.index("-n") + 1] for args in self.calls if "-n" in args]


def _controller(
    monkeypatch: pytest.MonkeyPatch,
    kubectl: FakeKubectl,
    **kwargs: Any,
) -> ClusterController:
    controller = ClusterController(API, **kwargs)
    monkeypatch.setattr(controller, "_run_kubectl_sync", kubectl)
    return controller


class TestClusterControllerInit:
    """Tests for ClusterController construction."""

    def test_controller_init(self) -> None:
        controller = ClusterController(API, kubeconfig="/tmp/kc", context="prod")
        assert controller.resource == API
        assert controller.kubeconfig == "/tmp/kc"
        assert controller.context == "prod"
        assert controller._max_concurrency == 1

    def test_max_concurrency_floor(self) -> None:
        controller = ClusterController(API, max_concurrency=0)
        assert controller._max_concurrency == 1

    def test_from_settings(self) -> None:
        settings = WatchSettings(
            resource=API,
            kubeconfig="/tmp/kc",
            context="prod",
            request_timeout="5s",
            max_concurrency=4,
            output_format=OutputFormat.KV,
        )

        controller = ClusterController.from_settings(settings)

        assert controller.kubeconfig == "/tmp/kc"
        assert controller.context == "prod"
        assert controller._max_concurrency == 4
        assert controller._namespace_fetcher._request_timeout == "5s"
        assert controller._resource_fetcher._request_timeout == "5s"

    def test_base_command_includes_kubeconfig_and_context(self) -> None:
        controller = ClusterController(API, kubeconfig="/tmp/kc", context="prod")
        assert controller._base_command() == [
            "kubectl",
            "--kubeconfig",
            "/tmp/kc",
            "--context",
            "prod",
        ]

    def test_base_command_without_options(self) -> None:
        assert ClusterController(API)._base_command() == ["kubectl"]


class TestRunKubectlSync:
    """Tests for the subprocess wrapper."""

    def test_returns_stdout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        captured: dict[str, Any] = {}

        def _fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            captured["cmd"] = cmd
            captured["kwargs"] = kwargs
            return subprocess.CompletedProcess(cmd, 0, stdout="out", stderr="")

        monkeypatch.setattr(subprocess, "run", _fake_run)
        controller = ClusterController(API, context="prod")

        assert controller._run_kubectl_sync(("get", "namespaces"), timeout=7) == "out"
        assert captured["cmd"] == ["kubectl", "--context", "prod", "get", "namespaces"]
        assert captured["kwargs"]["timeout"] == 7
        assert captured["kwargs"]["capture_output"] is True

    def test_non_zero_exit_raises_kubectl_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr=NOT_FOUND + "\n")

        monkeypatch.setattr(subprocess, "run", _fake_run)

        with pytest.raises(KubectlError) as excinfo:
            ClusterController(API)._run_kubectl_sync(("get", "deployment", "api"))

        assert excinfo.value.is_not_found
        assert excinfo.value.returncode == 1
        assert excinfo.value.command_args == ("get", "deployment", "api")

    @pytest.mark.parametrize(
        ("request_timeout", "expected"),
        [
            ("5s", 45),
            ("30s", 45),
            ("60s", 70),
            ("2m", 130),
            ("1h", 3610),
            ("500ms", 45),
        ],
    )
    def test_process_timeout_follows_request_timeout(
        self,
        monkeypatch: pytest.MonkeyPatch,
        request_timeout: str,
        expected: int,
    ) -> None:
        captured: dict[str, Any] = {}

        def _fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            captured["timeout"] = kwargs["timeout"]
            return subprocess.CompletedProcess(cmd, 0, stdout="{}", stderr="")

        monkeypatch.setattr(subprocess, "run", _fake_run)
        controller = ClusterController(API, request_timeout=request_timeout)

        controller._run_kubectl_sync(controller._namespace_fetcher._build_args())

        assert captured["timeout"] == expected

    def test_process_timeout_without_request_timeout(self) -> None:
        controller = ClusterController(API)
        assert controller._kubectl_timeout_for_args(("config", "view")) == 45

    @pytest.mark.asyncio
    async def test_async_runner_uses_request_timeout(
        self,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        captured: dict[str, Any] = {}

        def _fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            captured["timeout"] = kwargs["timeout"]
            return subprocess.CompletedProcess(cmd, 0, stdout='{"items": []}', stderr="")

        monkeypatch.setattr(subprocess, "run", _fake_run)
        controller = ClusterController(API, request_timeout="2m")

        assert await controller.list_namespaces() == []
        assert captured["timeout"] > 120


class TestCheckConnection:
    """Tests for ClusterController.check_connection."""

    @pytest.mark.asyncio
    async def test_valid_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        controller = ClusterController(API)
        monkeypatch.setattr(
            controller,
            "_run_kubectl_sync",
            lambda args, timeout=None: json.dumps(
                {"contexts": [{"name": "kind"}], "current-context": "kind"}
            ),
        )

        assert await controller.check_connection() is True

    @pytest.mark.asyncio
    async def test_missing_kubeconfig_file(self, tmp_path: Any) -> None:
        controller = ClusterController(API, kubeconfig=str(tmp_path / "missing"))

        with pytest.raises(FatalConnectionError, match="kubeconfig not found"):
            await controller.check_connection()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error", "message"),
        [
            (FileNotFoundError("kubectl"), "kubectl executable not found"),
            (subprocess.TimeoutExpired(cmd="kubectl", timeout=8), "timed out"),
            (
                KubectlError(("config", "view"), "error: error loading config file", 1),
                "cannot load cluster configuration",
            ),
        ],
    )
    async def test_kubectl_failures_are_fatal(
        self,
        monkeypatch: pytest.MonkeyPatch,
        error: Exception,
        message: str,
    ) -> None:
        controller = ClusterController(API)

        def _raise(args: tuple[str, ...], timeout: int | None = None) -> str:
            raise error

        monkeypatch.setattr(controller, "_run_kubectl_sync", _raise)

        with pytest.raises(FatalConnectionError, match=message):
            await controller.check_connection()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("output", ['{"contexts": null}', "{}", "oops"])
    async def test_unusable_config_is_fatal(
        self,
        monkeypatch: pytest.MonkeyPatch,
        output: str,
    ) -> None:
        controller = ClusterController(API)
        monkeypatch.setattr(controller, "_run_kubectl_sync", lambda args, timeout=None: output)

        with pytest.raises(FatalConnectionError):
            await controller.check_connection()


class TestFold:
    """Tests for ClusterController.fold."""

    def test_only_found_outcomes_are_kept(self) -> None:
        outcomes = [
            FetchOutcome.found("a", 3),
            FetchOutcome.not_found("b"),
            FetchOutcome.failed("c", "Forbidden"),
            FetchOutcome.found("d", 0),
        ]
        assert ClusterController.fold(outcomes) == {"a": 3, "d": 0}

    def test_later_observation_wins(self) -> None:
        outcomes = [
            FetchOutcome.found("a", 1),
            FetchOutcome.found("a", 4),
            FetchOutcome.found("b", 2),
            FetchOutcome.not_found("b"),
        ]
        assert ClusterController.fold(outcomes) == {"a": 4}

    def test_empty(self) -> None:
        assert ClusterController.fold([]) == {}


class TestSweep:
    """Tests for sweeps across namespaces."""

    @pytest.mark.asyncio
    async def test_found_and_not_found(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Found in a (3) and c (0), missing in b."""
        kubectl = FakeKubectl(["a", "b", "c"], {"a": _deployment(3), "c": _deployment(None)})
        controller = _controller(monkeypatch, kubectl)

        result = await controller.collect(cycle=1)

        assert result.snapshot.replicas == {"a": 3, "c": 0}
        assert result.snapshot.cycle == 1
        assert result.snapshot.resource == API
        assert result.not_found_namespaces() == ["b"]
        assert result.error_outcomes() == []

    @pytest.mark.asyncio
    async def test_permission_error_is_isolated(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Found in a (2), forbidden in b."""
        kubectl = FakeKubectl(
            ["a", "b"],
            {"a": _deployment(2), "b": KubectlError(("get",), FORBIDDEN, 1)},
        )
        controller = _controller(monkeypatch, kubectl)

        result = await controller.collect(cycle=1)

        assert result.snapshot.replicas == {"a": 2}
        errors = result.error_outcomes()
        assert [outcome.namespace for outcome in errors] == ["b"]
        assert "Forbidden" in (errors[0].error or "")

    @pytest.mark.asyncio
    async def test_error_in_first_namespace_does_not_stop_the_rest(
        self,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        kubectl = FakeKubectl(
            ["a", "b", "c"],
            {
                "a": RuntimeError("unexpected"),
                "b": _deployment(5),
                "c": "<html>bad gateway</html>",
            },
        )
        controller = _controller(monkeypatch, kubectl)

        result = await controller.collect()

        assert result.snapshot.replicas == {"b": 5}
        assert [o.status for o in result.outcomes] == [
            OutcomeStatus.ERROR,
            OutcomeStatus.FOUND,
            OutcomeStatus.ERROR,
        ]

    @pytest.mark.asyncio
    async def test_namespace_listing_failure_is_fatal(
        self,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        kubectl = FakeKubectl(
            KubectlError(
                ("get", "namespaces"),
                "Unable to connect to the server: connection reset by peer",
                1,
            )
        )
        controller = _controller(monkeypatch, kubectl)

        with pytest.raises(FatalEnumerationError, match="connection reset by peer"):
            await controller.collect()

        assert kubectl.fetched_namespaces() == []

    @pytest.mark.asyncio
    async def test_namespaces_visited_in_enumeration_order(
        self,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        kubectl = FakeKubectl(["c", "a", "b"])
        controller = _controller(monkeypatch, kubectl)

        result = await controller.collect()

        assert kubectl.fetched_namespaces() == ["a", "b", "c"]
        assert [o.namespace for o in result.outcomes] == ["a", "b", "c"]
        assert result.snapshot.replicas == {}

    @pytest.mark.asyncio
    async def test_duplicate_namespace_later_observation_wins(
        self,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        responses = iter([_deployment(1), _deployment(7)])
        controller = ClusterController(API)

        def _kubectl(args: tuple[str, ...], timeout: int | None = None) -> str:
            return next(responses)

        monkeypatch.setattr(controller, "_run_kubectl_sync", _kubectl)

        result = await controller.sweep(["a", "a"])

        assert result.snapshot.replicas == {"a": 7}
        assert len(result.outcomes) == 2

    @pytest.mark.asyncio
    async def test_empty_namespace_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        controller = _controller(monkeypatch, FakeKubectl([]))

        result = await controller.collect()

        assert result.snapshot.replicas == {}
        assert result.outcomes == []

    @pytest.mark.asyncio
    async def test_back_to_back_sweeps_are_identical(
        self,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        kubectl = FakeKubectl(
            ["a", "b", "c"],
            {"a": _deployment(3), "b": KubectlError(("get",), FORBIDDEN, 1)},
        )
        controller = _controller(monkeypatch, kubectl)

        first = await controller.collect(cycle=1)
        second = await controller.collect(cycle=2)

        assert first.snapshot.replicas == second.snapshot.replicas
        assert first.outcomes == second.outcomes

    @pytest.mark.asyncio
    async def test_fetch_never_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Even a fetcher that raises is contained to its namespace."""
        controller = ClusterController(API)

        async def _boom(namespace: str, identity: ResourceIdentity) -> FetchOutcome:
            raise ValueError("fetcher bug")

        monkeypatch.setattr(controller._resource_fetcher, "fetch", _boom)

        outcome = await controller.fetch("a")

        assert outcome.status is OutcomeStatus.ERROR
        assert outcome.error == "fetcher bug"


class TestConcurrentSweep:
    """Tests for bounded fan-out."""

    @pytest.mark.asyncio
    async def test_results_match_sequential_sweep(
        self,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        namespaces = [f"ns-{index:02d}" for index in range(12)]
        responses: dict[str, Any] = {
            ns: _deployment(index) for index, ns in enumerate(namespaces) if index % 3
        }
        responses["ns-04"] = KubectlError(("get",), FORBIDDEN, 1)

        sequential = _controller(monkeypatch, FakeKubectl(namespaces, responses))
        concurrent = _controller(
            monkeypatch,
            FakeKubectl(namespaces, responses, delay=0.01),
            max_concurrency=4,
        )

        expected = await sequential.collect()
        actual = await concurrent.collect()

        assert actual.snapshot.replicas == expected.snapshot.replicas
        assert actual.outcomes == expected.outcomes

    @pytest.mark.asyncio
    async def test_in_flight_fetches_are_bounded(
        self,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        namespaces = [f"ns-{index}" for index in range(10)]
        kubectl = FakeKubectl(
            namespaces,
            {ns: _deployment(1) for ns in namespaces},
            delay=0.02,
        )
        controller = _controller(monkeypatch, kubectl, max_concurrency=3)

        result = await controller.collect()

        assert len(result.snapshot.replicas) == 10
        assert 1 <= kubectl.max_in_flight <= 3
