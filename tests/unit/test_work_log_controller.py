"""Unit tests for the WorkLogController."""

import asyncio

import pytest

from worklog_client.application.services import FetchStatus, WorkLogController
from worklog_client.domain.entities import (
    ConnectionState,
    QueryContext,
    SortDirection,
    SortField,
    StatusFilter,
)
from worklog_client.domain.exceptions import ChannelError, TransportError
from worklog_client.infrastructure.visibility import PageVisibility
from tests.unit.fakes import (
    HOLD,
    FakeEventSource,
    FakeWorkLogGateway,
    RecordingNotifier,
    RecordingProjector,
    RecordingSleep,
    frame,
    row,
    wait_for,
)


def _controller(gateway: FakeWorkLogGateway, source: FakeEventSource | None = None, **kwargs):
    notifier = RecordingNotifier()
    controller = WorkLogController(
        gateway,
        source or FakeEventSource([frame("connect", "ok"), HOLD]),
        notifier,
        client_id="client-1",
        sleep=RecordingSleep(),
        **kwargs,
    )
    return controller, notifier


@pytest.mark.asyncio
async def test_start_connects_and_loads():
    gateway = FakeWorkLogGateway([row(1), row(2)])
    controller, _ = _controller(gateway)

    outcome = await controller.start()
    await wait_for(lambda: controller.channel.state is ConnectionState.CONNECTED)

    assert outcome.applied
    assert len(controller.store) == 2
    await controller.aclose()


@pytest.mark.asyncio
async def test_select_date_commits_context_after_fetch():
    gateway = FakeWorkLogGateway([row(1, "25.01.05 09:00"), row(2, "25.01.06 09:00")])
    controller, _ = _controller(gateway)

    await controller.select_date("25.01.06")

    assert controller.context.selected_date == "25.01.06"
    assert [r.id for r in controller.store.snapshot()] == [2]


@pytest.mark.asyncio
async def test_invalid_date_keeps_previous_context():
    gateway = FakeWorkLogGateway([row(1)])
    controller, notifier = _controller(gateway)
    await controller.select_date("25.01.05")

    outcome = await controller.select_date("2025-01-05")

    assert outcome.status is FetchStatus.INVALID
    assert controller.context.selected_date == "25.01.05"
    assert "YY.MM.DD" in notifier.messages[-1]


@pytest.mark.asyncio
async def test_failed_fetch_keeps_previous_context():
    gateway = FakeWorkLogGateway([row(1)])
    controller, _ = _controller(gateway)
    gateway.fail_with = TransportError("GET", "/api/worklogs", "down", 502)

    with pytest.raises(TransportError):
        await controller.set_status(StatusFilter.COMPLETED)

    assert controller.context.status is StatusFilter.ALL


@pytest.mark.asyncio
async def test_clear_date_returns_to_full_list():
    gateway = FakeWorkLogGateway([row(1, "25.01.05 09:00"), row(2, "25.01.06 09:00")])
    controller, _ = _controller(gateway)
    await controller.select_date("25.01.05")

    await controller.clear_date()

    assert controller.context.selected_date is None
    assert len(controller.store) == 2


@pytest.mark.asyncio
async def test_set_sort_toggles_direction_on_same_field():
    gateway = FakeWorkLogGateway([row(1)])
    controller, _ = _controller(gateway)

    await controller.set_sort(SortField.WORK_DATETIME)
    assert controller.context.sort_direction is SortDirection.DESC

    await controller.set_sort(SortField.CAR_MODEL)
    assert controller.context.sort_field is SortField.CAR_MODEL
    assert controller.context.sort_direction is SortDirection.ASC


@pytest.mark.asyncio
async def test_load_more_advances_page():
    gateway = FakeWorkLogGateway([row(i) for i in range(1, 6)])
    controller, _ = _controller(gateway, context=QueryContext(page_size=2))
    await controller.reload()

    await controller.load_more()

    assert controller.context.page == 2
    assert len(controller.store) == 4


@pytest.mark.asyncio
async def test_projector_renders_every_change():
    gateway = FakeWorkLogGateway([row(1)])
    controller, _ = _controller(gateway)
    projector = RecordingProjector()

    remove = controller.add_projector(projector)
    await controller.reload()
    remove()
    await controller.reload()

    assert [len(r) for r in projector.renders] == [0, 1]


@pytest.mark.asyncio
async def test_push_events_respect_committed_context():
    source = FakeEventSource([
        frame("connect", "ok"),
        frame("worklog-created", row(2, "25.01.06 09:00")),
        frame("worklog-created", row(3, "25.01.05 18:00")),
        HOLD,
    ])
    gateway = FakeWorkLogGateway([row(1, "25.01.05 09:00")])
    controller, _ = _controller(gateway, source)
    await controller.select_date("25.01.05")
    controller.channel.connect()
    await wait_for(lambda: 3 in controller.store)

    assert sorted(r.id for r in controller.store.snapshot()) == [1, 3]
    await controller.aclose()


@pytest.mark.asyncio
async def test_follow_up_refresh_keeps_pending_date_selection():
    gateway = FakeWorkLogGateway([row(1, "25.01.05 09:00"), row(2, "25.01.06 09:00")])
    controller, _ = _controller(gateway)
    await controller.reload()
    gate = gateway.hold_list_call(1)

    selecting = asyncio.create_task(controller.select_date("25.01.06"))
    await wait_for(lambda: ("date", "2025-01-06") in gateway.calls)
    assert controller.requested_context.selected_date == "25.01.06"
    assert controller.context.selected_date is None

    await controller.mutations.refresh()
    gate.set()
    outcome = await selecting

    assert outcome.status is FetchStatus.STALE
    assert controller.context.selected_date == "25.01.06"
    assert [r.id for r in controller.store.snapshot()] == [2]


@pytest.mark.asyncio
async def test_push_refresh_keeps_pending_date_selection():
    gateway = FakeWorkLogGateway([
        row(1, "25.01.05 09:00"),
        row(2, "25.01.06 09:00"),
        row(3, "25.01.06 11:00"),
    ])
    source = FakeEventSource([
        frame("connect", "ok"),
        frame("worklog-updated", row(3, "25.01.06 11:00")),
        HOLD,
    ])
    controller, _ = _controller(gateway, source)
    gateway.rows.pop(3)
    await controller.reload()
    gateway.rows[3] = row(3, "25.01.06 11:00")
    gate = gateway.hold_list_call(1)

    selecting = asyncio.create_task(controller.select_date("25.01.06"))
    await wait_for(lambda: ("date", "2025-01-06") in gateway.calls)
    controller.channel.connect()
    await wait_for(lambda: 3 in controller.store)
    gate.set()
    await selecting

    assert controller.context.selected_date == "25.01.06"
    assert sorted(r.id for r in controller.store.snapshot()) == [2, 3]
    await controller.aclose()


@pytest.mark.asyncio
async def test_failed_request_falls_back_to_loaded_context():
    gateway = FakeWorkLogGateway([row(1)])
    controller, _ = _controller(gateway)
    gateway.fail_with = TransportError("GET", "/api/worklogs", "down", 502)

    with pytest.raises(TransportError):
        await controller.select_date("25.01.06")
    gateway.fail_with = None
    await controller.mutations.refresh()

    assert controller.requested_context.selected_date is None
    assert ("date", "2025-01-06") in gateway.calls
    assert gateway.calls[-1][0] == "list"


@pytest.mark.asyncio
async def test_load_more_waits_for_pending_view_change():
    gateway = FakeWorkLogGateway([row(i) for i in range(1, 6)])
    controller, _ = _controller(gateway, context=QueryContext(page_size=2))
    await controller.reload()
    gate = gateway.hold_list_call(1)

    sorting = asyncio.create_task(controller.set_sort(SortField.CAR_MODEL))
    await wait_for(lambda: len(gateway.calls) == 2)
    outcome = await controller.load_more()
    gate.set()
    await sorting

    assert outcome.status is FetchStatus.STALE
    assert len(gateway.calls) == 2
    assert controller.context.sort_field is SortField.CAR_MODEL
    assert controller.context.page == 1


@pytest.mark.asyncio
async def test_page_becoming_visible_reconnects_exhausted_channel():
    visibility = PageVisibility()
    source = FakeEventSource([ChannelError("dropped")], [frame("connect", "ok"), HOLD])
    controller, _ = _controller(
        FakeWorkLogGateway(), source, max_reconnect_attempts=0, visibility=visibility
    )

    controller.channel.connect()
    await wait_for(lambda: controller.channel.exhausted)
    visibility.set_visible(False)
    visibility.set_visible(True)
    await wait_for(lambda: controller.channel.state is ConnectionState.CONNECTED)

    assert source.opened == 2
    await controller.aclose()
