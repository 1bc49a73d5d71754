"""Snapshot reporters.

Each reporter renders one SweepResult per call:
- text: the classic labeled block, one line per namespace
- kv: line-delimited key=value records, including not-found and error rows
- table: a rich table with a not-found / error caption
"""

from __future__ import annotations

import sys
from typing import TextIO

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from replicawatch.constants.enums import OutcomeStatus, OutputFormat
from replicawatch.constants.values import REPORT_DIVIDER, REPORT_HEADER_RULE
from replicawatch.models.core.snapshot_info import SweepResult


class TextSnapshotReporter:
    """Labeled plain-text block per cycle."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    @staticmethod
    def render(result: SweepResult) -> str:
        snapshot = result.snapshot
        resource = snapshot.resource
        lines = [
            f"{REPORT_HEADER_RULE} {resource.kind.value}: {resource.name} "
            f"{REPORT_HEADER_RULE[:-1]}",
        ]
        lines.extend(
            f"Namespace: {namespace} - Replicas: {snapshot.replicas[namespace]}"
            for namespace in snapshot.namespaces()
        )
        lines.append(REPORT_DIVIDER)
        return "\n".join(lines) + "\n"

    def __call__(self, result: SweepResult) -> None:
        self.stream.write(self.render(result))
        self.stream.flush()


class KeyValueSnapshotReporter:
    """One ``key=value`` record per namespace outcome."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    @staticmethod
    def _quote(value: str) -> str:
        if value and not any(ch.isspace() or ch in '"=' for ch in value):
            return value
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    @classmethod
    def render(cls, result: SweepResult) -> str:
        snapshot = result.snapshot
        prefix = (
            f"cycle={snapshot.cycle} kind={snapshot.resource.kind.value} "
            f"name={cls._quote(snapshot.resource.name)}"
        )
        lines = [
            f"{prefix} namespace={namespace} replicas={snapshot.replicas[namespace]}"
            for namespace in snapshot.namespaces()
        ]
        for outcome in result.outcomes:
            if outcome.status is OutcomeStatus.NOT_FOUND:
                lines.append(f"{prefix} namespace={outcome.namespace} status=not_found")
            elif outcome.status is OutcomeStatus.ERROR:
                lines.append(
                    f"{prefix} namespace={outcome.namespace} status=error "
                    f"error={cls._quote(outcome.error or '')}"
                )
        return "".join(f"{line}\n" for line in lines)

    def __call__(self, result: SweepResult) -> None:
        self.stream.write(self.render(result))
        self.stream.flush()


class TableSnapshotReporter:
    """rich table per cycle."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    @staticmethod
    def build_table(result: SweepResult) -> Table:
        snapshot = result.snapshot
        table = Table(
            title=f"{snapshot.resource.display} (cycle {snapshot.cycle})",
            show_header=True,
            header_style="bold magenta",
            box=box.ROUNDED,
        )
        table.add_column("Namespace")
        table.add_column("Replicas", justify="right")
        for namespace in snapshot.namespaces():
            table.add_row(namespace, str(snapshot.replicas[namespace]))

        errors = result.error_outcomes()
        caption = f"{len(result.not_found_namespaces())} not found, {len(errors)} errors"
        if errors:
            caption += " (" + ", ".join(o.namespace for o in errors) + ")"
        # rich wraps str captions to the table width
        table.caption = Text(caption, no_wrap=True, overflow="ignore")
        return table

    def __call__(self, result: SweepResult) -> None:
        self.console.print(self.build_table(result))


def build_reporter(
    output_format: OutputFormat,
    stream: TextIO | None = None,
) -> TextSnapshotReporter | KeyValueSnapshotReporter | TableSnapshotReporter:
    """Return the reporter for ``output_format`` writing to ``stream`` (stdout by default)."""
    if output_format is OutputFormat.KV:
        return KeyValueSnapshotReporter(stream)
    if output_format is OutputFormat.TABLE:
        return TableSnapshotReporter(Console(file=stream) if stream is not None else None)
    return TextSnapshotReporter(stream)
