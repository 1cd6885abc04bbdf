"""Unit tests for render-time ordering and urgency."""

from datetime import datetime

import pytest

from worklog_client.application.services import classify_urgency, order_rows, project
from worklog_client.domain.entities import (
    QueryContext,
    SortDirection,
    SortField,
    WorkLogRecord,
    WorkUrgency,
)

NOW = datetime(2025, 1, 5, 9, 0)


def _record(record_id: int, work_datetime: str = "25.01.05 12:00", **fields) -> WorkLogRecord:
    return WorkLogRecord(id=record_id, work_datetime=work_datetime, car_model="K5", **fields)


@pytest.mark.parametrize(
    "work_datetime, expected",
    [
        ("25.01.05 08:59", WorkUrgency.PASSED),
        ("25.01.05 09:30", WorkUrgency.DANGER),
        ("25.01.05 10:00", WorkUrgency.DANGER),
        ("25.01.05 11:00", WorkUrgency.WARNING),
        ("25.01.05 14:00", WorkUrgency.CAUTION),
        ("25.01.05 15:01", WorkUrgency.NORMAL),
        ("25.01.05", WorkUrgency.PASSED),
        ("garbage", WorkUrgency.UNKNOWN),
    ],
)
def test_classify_urgency(work_datetime: str, expected: WorkUrgency):
    assert classify_urgency(_record(1, work_datetime), NOW) is expected


def test_order_rows_ascending_and_descending():
    rows = [
        _record(1, "25.01.05 12:00"),
        _record(2, "25.01.04 12:00"),
        _record(3, "25.01.06 12:00"),
    ]

    asc = order_rows(rows, SortField.WORK_DATETIME, SortDirection.ASC)
    desc = order_rows(rows, SortField.WORK_DATETIME, SortDirection.DESC)

    assert [r.id for r in asc] == [2, 1, 3]
    assert [r.id for r in desc] == [3, 1, 2]


def test_order_rows_puts_missing_values_last():
    rows = [_record(1), _record(2, product_name="Bumper"), _record(3, product_name="Apron")]

    for direction in SortDirection:
        ordered = order_rows(rows, SortField.PRODUCT_NAME, direction)
        assert ordered[-1].id == 1


def test_order_rows_does_not_touch_input():
    rows = (_record(2), _record(1))
    order_rows(rows, SortField.WORK_DATETIME, SortDirection.ASC)
    assert [r.id for r in rows] == [2, 1]


def test_project_orders_by_context_and_classifies():
    rows = [_record(1, "25.01.05 20:00"), _record(2, "25.01.05 08:00")]
    context = QueryContext(sort_field=SortField.WORK_DATETIME, sort_direction=SortDirection.ASC)

    projected = project(rows, context, NOW)

    assert [(p.record.id, p.urgency) for p in projected] == [
        (2, WorkUrgency.PASSED),
        (1, WorkUrgency.NORMAL),
    ]
