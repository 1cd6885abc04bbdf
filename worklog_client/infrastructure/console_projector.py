"""Plain-text table view for terminal sessions."""

import sys
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import TextIO

from worklog_client.application.interfaces import ViewProjector
from worklog_client.application.services.view_projection import project
from worklog_client.domain.entities import (
    ConnectionState,
    QueryContext,
    WorkLogRecord,
    WorkUrgency,
)

_URGENCY_MARKS = {
    WorkUrgency.PASSED: "x",
    WorkUrgency.DANGER: "!!!",
    WorkUrgency.WARNING: "!!",
    WorkUrgency.CAUTION: "!",
    WorkUrgency.NORMAL: "",
    WorkUrgency.UNKNOWN: "?",
}

_COLUMNS = (
    ("ID", 6),
    ("Date", 14),
    ("Car model", 12),
    ("Qty", 5),
    ("Color", 10),
    ("Code", 12),
    ("Product", 20),
    ("Done", 4),
    ("", 3),
)


class ConsoleProjector(ViewProjector):
    """Prints the ordered snapshot as a fixed-width table on every change."""

    def __init__(
        self,
        context_provider: Callable[[], QueryContext],
        stream: TextIO | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._context_provider = context_provider
        self._stream = stream or sys.stdout
        self._clock = clock

    def render(self, snapshot: Sequence[WorkLogRecord]) -> None:
        lines = [self._row(name for name, _ in _COLUMNS)]
        for row in project(snapshot, self._context_provider(), self._clock()):
            r = row.record
            lines.append(
                self._row((
                    str(r.id),
                    r.work_datetime,
                    r.car_model,
                    str(r.quantity),
                    r.product_color or "",
                    r.product_code or "",
                    r.product_name or "",
                    "yes" if r.is_complete else "",
                    _URGENCY_MARKS[row.urgency],
                ))
            )
        lines.append(f"({len(snapshot)} records)")
        self._write("\n".join(lines))

    def connection_changed(self, state: ConnectionState) -> None:
        self._write(f"[live updates: {state.value}]")

    @staticmethod
    def _row(cells) -> str:
        return " ".join(
            str(cell)[:width].ljust(width) for cell, (_, width) in zip(cells, _COLUMNS)
        ).rstrip()

    def _write(self, text: str) -> None:
        self._stream.write(text + "\n")
        self._stream.flush()
