"""Unit tests for the NoticeBoard."""

import asyncio

import pytest

from worklog_client.application.services import NoticeBoard
from worklog_client.domain.entities import Notice, NoticeLevel
from tests.unit.fakes import RecordingNotifier


def test_notify_without_running_loop_keeps_notice():
    board = NoticeBoard()
    board.notify(Notice("Saved."))
    assert board.current == Notice("Saved.")


def test_new_notice_replaces_current_and_is_forwarded():
    display = RecordingNotifier()
    board = NoticeBoard(display=display)

    board.notify(Notice("first"))
    board.notify(Notice("second", NoticeLevel.ERROR, 3.0))

    assert board.current.message == "second"
    assert display.messages == ["first", "second"]
    assert [n.message for n in board.history] == ["first", "second"]


@pytest.mark.asyncio
async def test_notice_is_dismissed_after_its_duration():
    board = NoticeBoard()
    board.notify(Notice("short", duration=0.01))

    await asyncio.sleep(0.05)

    assert board.current is None


@pytest.mark.asyncio
async def test_replacing_notice_restarts_timer():
    board = NoticeBoard()
    board.notify(Notice("short", duration=0.01))
    board.notify(Notice("long", duration=5.0))

    await asyncio.sleep(0.05)

    assert board.current.message == "long"
    board.close()


@pytest.mark.asyncio
async def test_terminal_notice_stays_until_dismissed():
    board = NoticeBoard()
    board.notify(Notice("Please reload.", NoticeLevel.ERROR, duration=0.01, terminal=True))

    await asyncio.sleep(0.05)
    assert board.current is not None

    board.dismiss()
    assert board.current is None


def test_history_is_bounded():
    board = NoticeBoard(history_size=2)
    for i in range(5):
        board.notify(Notice(str(i)))
    assert [n.message for n in board.history] == ["3", "4"]
