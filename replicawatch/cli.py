"""Command-line entry point.

    replicawatch replicaDrift --deployment NAME [--kubeconfig PATH] ...

Exit statuses: 0 after a graceful stop or a bounded run, 1 on usage,
configuration or fatal cluster errors, 130 when interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import Any, NoReturn

from replicawatch.constants.defaults import default_kubeconfig_path
from replicawatch.constants.enums import OutputFormat, WorkloadKind
from replicawatch.constants.values import (
    APP_NAME,
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_OK,
    REPLICA_DRIFT_COMMAND,
)
from replicawatch.controllers.cluster.controller import ClusterController
from replicawatch.errors import FatalError
from replicawatch.models.state.app_settings import ConfigError, WatchSettings
from replicawatch.models.state.config_manager import ConfigManager
from replicawatch.reporting import build_reporter
from replicawatch.scheduler import PollScheduler
from replicawatch.utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)


class _UsageArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _UsageArgumentParser(
        prog=APP_NAME,
        description="Report the observed replica count of a workload in every namespace.",
    )
    subparsers = parser.add_subparsers(
        dest="command",
        metavar="COMMAND",
        parser_class=_UsageArgumentParser,
    )

    drift = subparsers.add_parser(
        REPLICA_DRIFT_COMMAND,
        help="poll a workload's replica count across all namespaces",
    )
    drift.add_argument(
        "--deployment",
        dest="resource_name",
        metavar="NAME",
        help="Workload name. (Required)",
    )
    drift.add_argument(
        "--kind",
        dest="resource_kind",
        choices=[kind.value for kind in WorkloadKind],
        help="workload kind (default: deployment)",
    )
    kubeconfig_default = default_kubeconfig_path()
    drift.add_argument(
        "--kubeconfig",
        metavar="PATH",
        help=(
            f"(optional) absolute path to the kubeconfig file (default: {kubeconfig_default})"
            if kubeconfig_default
            else "absolute path to the kubeconfig file"
        ),
    )
    drift.add_argument("--context", metavar="NAME", help="kubeconfig context to use")
    drift.add_argument(
        "--interval",
        dest="poll_interval_seconds",
        type=float,
        metavar="SECONDS",
        help="seconds between cycles (default: 10)",
    )
    drift.add_argument(
        "--max-concurrency",
        type=int,
        metavar="N",
        help="namespaces fetched at once (default: 1, sequential)",
    )
    drift.add_argument(
        "--request-timeout",
        metavar="DURATION",
        help="kubectl request timeout (default: 30s)",
    )
    drift.add_argument(
        "--output",
        dest="output_format",
        choices=[output_format.value for output_format in OutputFormat],
        help="report format (default: text)",
    )
    drift.add_argument("--config", dest="config_path", metavar="FILE", help="YAML settings file")
    drift.add_argument(
        "--log-level",
        metavar="LEVEL",
        help="log level for stderr diagnostics (default: WARNING)",
    )
    cycles = drift.add_mutually_exclusive_group()
    cycles.add_argument(
        "--once",
        dest="max_cycles",
        action="store_const",
        const=1,
        help="run a single cycle and exit",
    )
    cycles.add_argument(
        "--cycles",
        dest="max_cycles",
        type=int,
        metavar="N",
        help="run N cycles and exit",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> WatchSettings:
    """Resolve settings from parsed arguments (and the optional config file)."""
    overrides: dict[str, Any] = {
        "resource_name": args.resource_name,
        "resource_kind": args.resource_kind,
        "kubeconfig": args.kubeconfig,
        "context": args.context,
        "poll_interval_seconds": args.poll_interval_seconds,
        "max_concurrency": args.max_concurrency,
        "request_timeout": args.request_timeout,
        "output_format": args.output_format,
        "max_cycles": args.max_cycles,
        "log_level": args.log_level,
    }
    return ConfigManager.build(overrides, config_path=args.config_path)


async def _run_scheduler(scheduler: PollScheduler) -> int:
    scheduler.install_signal_handlers()
    await scheduler.run()
    return EXIT_OK


def _fatal(message: str) -> int:
    print(f"fatal: {message}", file=sys.stderr)
    return EXIT_FAILURE


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command != REPLICA_DRIFT_COMMAND:
        parser.print_usage(sys.stderr)
        return EXIT_FAILURE

    try:
        settings = settings_from_args(args)
    except ConfigError as exc:
        return _fatal(str(exc))

    configure_logging(settings.log_level)
    logger.debug("Settings: %s", settings.model_dump(mode="json"))

    controller = ClusterController.from_settings(settings)
    reporter = build_reporter(settings.output_format)
    scheduler = PollScheduler.from_settings(settings, controller, reporter)

    try:
        return asyncio.run(_run_scheduler(scheduler))
    except FatalError as exc:
        return _fatal(str(exc))
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
