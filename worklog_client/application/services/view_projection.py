"""Render-time projection of store snapshots: ordering and row urgency."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from worklog_client.domain.entities import (
    QueryContext,
    SortDirection,
    SortField,
    WorkLogRecord,
    WorkUrgency,
)


@dataclass(frozen=True)
class ProjectedRow:
    record: WorkLogRecord
    urgency: WorkUrgency


def order_rows(
    snapshot: Sequence[WorkLogRecord],
    sort_field: SortField,
    sort_direction: SortDirection,
) -> list[WorkLogRecord]:
    """Sort a snapshot for display. Records missing the field go last either way."""
    attribute = sort_field.attribute
    present = [r for r in snapshot if getattr(r, attribute) is not None]
    missing = [r for r in snapshot if getattr(r, attribute) is None]
    present.sort(
        key=lambda r: (getattr(r, attribute), r.id),
        reverse=sort_direction is SortDirection.DESC,
    )
    return present + missing


def classify_urgency(record: WorkLogRecord, now: datetime | None = None) -> WorkUrgency:
    """Row highlight for ``record``: passed, then danger/warning/caution within 1/3/6 hours."""
    return record.urgency(now or datetime.now())


def project(
    snapshot: Sequence[WorkLogRecord],
    context: QueryContext,
    now: datetime | None = None,
) -> list[ProjectedRow]:
    now = now or datetime.now()
    return [
        ProjectedRow(record, classify_urgency(record, now))
        for record in order_rows(snapshot, context.sort_field, context.sort_direction)
    ]
