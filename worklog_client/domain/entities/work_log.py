"""Domain entity — one scheduled manufacturing task (a work-log record)."""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from worklog_client.domain import date_codec


class WorkUrgency(str, Enum):
    """How close a task's scheduled time is, relative to now."""

    PASSED = "passed"
    DANGER = "danger"      # within 1 hour
    WARNING = "warning"    # within 3 hours
    CAUTION = "caution"    # within 6 hours
    NORMAL = "normal"
    UNKNOWN = "unknown"    # work_datetime does not parse


_URGENCY_THRESHOLDS: tuple[tuple[timedelta, WorkUrgency], ...] = (
    (timedelta(hours=1), WorkUrgency.DANGER),
    (timedelta(hours=3), WorkUrgency.WARNING),
    (timedelta(hours=6), WorkUrgency.CAUTION),
)


@dataclass(frozen=True)
class WorkLogRecord:
    """Core domain entity mirrored from the backend.

    Instances are immutable; every change produces a new record so that
    snapshots handed to the view can never be modified behind its back.
    ``work_datetime`` is always in compact ``YY.MM.DD HH:MM`` form.
    """

    id: int
    work_datetime: str
    car_model: str
    quantity: int = 0
    product_color: str | None = None
    product_code: str | None = None
    product_name: str | None = None
    completed_at: str | None = None
    completed_by: str | None = None
    created_at: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None

    @property
    def work_date(self) -> str:
        """The ``YY.MM.DD`` part of ``work_datetime``."""
        return self.work_datetime.split(" ", 1)[0]

    def with_status(self, completed: bool, actor: str | None, timestamp: str) -> "WorkLogRecord":
        """Return a copy with completion set (or cleared) by ``actor``."""
        return replace(
            self,
            completed_at=timestamp if completed else None,
            completed_by=actor,
        )

    def urgency(self, now: datetime) -> WorkUrgency:
        """Classify the scheduled time against ``now`` for row highlighting."""
        scheduled = date_codec.to_datetime(self.work_datetime)
        if scheduled is None:
            return WorkUrgency.UNKNOWN
        if scheduled < now:
            return WorkUrgency.PASSED

        remaining = scheduled - now
        for limit, level in _URGENCY_THRESHOLDS:
            if remaining <= limit:
                return level
        return WorkUrgency.NORMAL
