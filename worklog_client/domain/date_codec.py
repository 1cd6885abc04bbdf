"""Compact date codec — conversions between ``YY.MM.DD[ HH:MM]`` and ISO strings.

Every function here is pure and none of them raises on malformed input
except ``to_iso_date``, whose callers validate with ``is_compact_date_only``
first.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from worklog_client.domain.exceptions import ValidationError

_COMPACT_DATE_ONLY = re.compile(r"^\d{2}\.\d{2}\.\d{2}$")
_COMPACT = re.compile(
    r"^(?P<yy>\d{2})\.(?P<mm>\d{2})\.(?P<dd>\d{2})"
    r"(?: (?P<hh>\d{2}):(?P<mi>\d{2}))?$"
)
_ISO_DATE = re.compile(r"^(?P<yyyy>\d{4})-(?P<mm>\d{2})-(?P<dd>\d{2})$")

# Two-digit years are always in this century
_CENTURY = 2000


@dataclass(frozen=True)
class CompactDate:
    """Components of a parsed compact date (time part optional)."""

    year: int
    month: int
    day: int
    hour: int | None = None
    minute: int | None = None

    @property
    def has_time(self) -> bool:
        return self.hour is not None

    def to_datetime(self) -> datetime:
        return datetime(
            self.year, self.month, self.day, self.hour or 0, self.minute or 0
        )


def parse_compact(value: str | None) -> CompactDate | None:
    """Parse ``YY.MM.DD`` or ``YY.MM.DD HH:MM``.

    Returns None for any other shape, and for shapes that do not name a
    real calendar date or clock time.
    """
    if not isinstance(value, str):
        return None
    match = _COMPACT.match(value.strip())
    if match is None:
        return None

    parsed = CompactDate(
        year=int(match["yy"]) + _CENTURY,
        month=int(match["mm"]),
        day=int(match["dd"]),
        hour=int(match["hh"]) if match["hh"] is not None else None,
        minute=int(match["mi"]) if match["mi"] is not None else None,
    )
    try:
        parsed.to_datetime()
    except ValueError:
        return None
    return parsed


def is_compact_date_only(value: str | None) -> bool:
    """Strict ``YY.MM.DD`` shape check."""
    return isinstance(value, str) and _COMPACT_DATE_ONLY.match(value) is not None


def to_iso_date(compact_date_only: str) -> str:
    """``YY.MM.DD`` -> ``YYYY-MM-DD``."""
    parsed = parse_compact(compact_date_only)
    if not is_compact_date_only(compact_date_only) or parsed is None:
        raise ValidationError(
            "date", str(compact_date_only), "expected a YY.MM.DD date"
        )
    return f"{parsed.year:04d}-{parsed.month:02d}-{parsed.day:02d}"


def to_compact_date(iso_date: str) -> str:
    """``YYYY-MM-DD`` -> ``YY.MM.DD``; anything else is returned unchanged."""
    if not isinstance(iso_date, str):
        return iso_date
    match = _ISO_DATE.match(iso_date)
    if match is None:
        return iso_date
    return f"{match['yyyy'][-2:]}.{match['mm']}.{match['dd']}"


def format_display(value: datetime) -> str:
    """Format a timestamp as ``YY.MM.DD HH:MM``."""
    return f"{format_search_date(value)} {value.hour:02d}:{value.minute:02d}"


def format_search_date(value: datetime) -> str:
    """Format a timestamp as ``YY.MM.DD``."""
    return f"{value.year % 100:02d}.{value.month:02d}.{value.day:02d}"


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse an ISO-8601 date or datetime, returning None when it is not one."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_iso_datetime(value: datetime) -> str:
    """Backend timestamp format (``YYYY-MM-DDTHH:MM:SS``)."""
    return value.isoformat(timespec="seconds")


def iso_to_display(value: str) -> str:
    """Convert an ISO datetime to ``YY.MM.DD HH:MM``.

    Values already in compact form, and values that are not ISO, pass
    through unchanged.
    """
    if parse_compact(value) is not None:
        return value
    parsed = parse_iso_datetime(value)
    if parsed is None:
        return value
    return format_display(parsed)


def to_datetime(compact: str) -> datetime | None:
    """Naive datetime for a compact value, or None if it does not parse."""
    parsed = parse_compact(compact)
    return parsed.to_datetime() if parsed is not None else None
