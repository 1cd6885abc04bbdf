"""LiveUpdateChannel — server-push subscription merged into the RecordStore.

State machine::

    DISCONNECTED -> CONNECTING -> CONNECTED
    CONNECTED/CONNECTING -(failure)-> RECONNECTING -> CONNECTING ...
    RECONNECTING -(attempts exhausted)-> DISCONNECTED (terminal notice)

The reconnect delay grows as ``base_delay * 1.5 ** (attempt - 1)``; the
attempt counter resets whenever the server confirms the connection.
"""

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from contextlib import aclosing
from typing import Any

from worklog_client.application.interfaces import LiveEventSource, Notifier, VisibilityMonitor
from worklog_client.application.schemas import decode_live_event
from worklog_client.application.services.query_client import QueryClient
from worklog_client.application.services.record_store import RecordStore
from worklog_client.domain.entities import (
    ConnectedEvent,
    ConnectionState,
    LiveEvent,
    Notice,
    NoticeLevel,
    QueryContext,
    RecordCreatedEvent,
    RecordDeletedEvent,
    RecordUpdatedEvent,
    RejectedEvent,
    ServerErrorEvent,
    WorkLogRecord,
)
from worklog_client.domain.exceptions import ChannelError, TransportError

logger = logging.getLogger(__name__)

StateObserver = Callable[[ConnectionState], Any]

BACKOFF_FACTOR = 1.5
TERMINAL_MESSAGE = "Live updates could not be restored. Please reload the page."

_MISSING = object()


class LiveUpdateChannel:
    """Keeps one push connection open and applies its events to the store.

    Events use the same store primitives as fetches and mutations, so the
    store converges no matter how push events interleave with in-flight
    requests. A small per-id ledger remembers the latest pushed state of
    each record: a ``created`` event never rolls back a record that an
    ``updated`` event already advanced, and never brings back a record a
    ``deleted`` event removed. The backend replays recent events to every
    new subscriber, so both cases happen on each reconnect.
    """

    def __init__(
        self,
        source: LiveEventSource,
        store: RecordStore,
        query_client: QueryClient,
        notifier: Notifier,
        *,
        context_provider: Callable[[], QueryContext],
        visibility: VisibilityMonitor | None = None,
        base_delay: float = 2.0,
        max_attempts: int = 5,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        ledger_size: int = 512,
    ) -> None:
        self._source = source
        self._store = store
        self._query = query_client
        self._notifier = notifier
        self._context_provider = context_provider
        self._visibility = visibility
        self._base_delay = base_delay
        self._max_attempts = max_attempts
        self._sleep = sleep
        self._ledger_size = ledger_size

        self._state = ConnectionState.DISCONNECTED
        self._attempts = 0
        self._exhausted = False
        self._closed = True
        self._reader: asyncio.Task | None = None
        self._reconnect_task: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()
        self._observers: list[StateObserver] = []
        self._ledger: OrderedDict[int, WorkLogRecord | None] = OrderedDict()

    # ── Public API ───────────────────────────────────────────────────

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def reconnect_attempts(self) -> int:
        return self._attempts

    @property
    def exhausted(self) -> bool:
        """True once the channel gave up and asked the user to reload."""
        return self._exhausted

    def add_state_observer(self, observer: StateObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def remove() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return remove

    def connect(self) -> None:
        """Open the push connection. No-op while connected or connecting."""
        if self._state in (ConnectionState.CONNECTED, ConnectionState.CONNECTING):
            return
        self._closed = False
        self._cancel_reconnect()
        self._open()

    def resume(self) -> None:
        """Page became visible again: reopen a dropped connection."""
        if not self._closed and self._state is ConnectionState.DISCONNECTED:
            logger.info("Page visible again; restoring live updates")
            if self._exhausted:
                self._attempts = 0
            self.connect()

    async def close(self) -> None:
        """Tear down the connection, pending reconnect and spawned refreshes.

        Safe to call any number of times.
        """
        self._closed = True
        current = asyncio.current_task()
        tasks = [
            t
            for t in (self._reader, self._reconnect_task, *self._background)
            if t is not None and t is not current and not t.done()
        ]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._reader = None
        self._reconnect_task = None
        self._background.clear()
        if self._state is not ConnectionState.DISCONNECTED:
            logger.info("Live update channel closed")
        self._set_state(ConnectionState.DISCONNECTED)

    # ── Connection lifecycle ─────────────────────────────────────────

    def _open(self) -> None:
        self._exhausted = False
        self._set_state(ConnectionState.CONNECTING)
        logger.debug("Opening live update connection")
        self._reader = asyncio.create_task(self._run())

    async def _run(self) -> None:
        reason = "stream closed by server"
        try:
            async with aclosing(self._source.stream()) as events:
                async for raw in events:
                    event = decode_live_event(raw)
                    if isinstance(event, ServerErrorEvent):
                        reason = f"server error event: {event.message}"
                        break
                    self._dispatch(event)
        except ChannelError as e:
            reason = str(e)
        except Exception as e:
            logger.exception("Live update stream failed unexpectedly")
            reason = f"{type(e).__name__}: {e}"

        self._reader = None
        self._connection_lost(reason)

    def _connection_lost(self, reason: str) -> None:
        if self._closed:
            return
        logger.warning("Live update connection lost: %s", reason)
        self._set_state(ConnectionState.RECONNECTING)

        if self._attempts >= self._max_attempts:
            logger.warning(
                "Giving up on live updates after %d reconnect attempt(s)", self._attempts
            )
            self._exhausted = True
            self._set_state(ConnectionState.DISCONNECTED)
            self._notifier.notify(
                Notice(TERMINAL_MESSAGE, NoticeLevel.ERROR, 5.0, terminal=True)
            )
            return

        self._attempts += 1
        delay = self._base_delay * BACKOFF_FACTOR ** (self._attempts - 1)
        logger.info(
            "Reconnecting in %.2fs (%d/%d)", delay, self._attempts, self._max_attempts
        )
        self._reconnect_task = asyncio.create_task(self._reconnect_after(delay))

    async def _reconnect_after(self, delay: float) -> None:
        await self._sleep(delay)
        if self._visibility is not None and not self._visibility.is_visible():
            logger.info("Page hidden; deferring reconnect until it is visible")
            await self._visibility.wait_until_visible()
        self._reconnect_task = None
        if not self._closed:
            self._open()

    def _cancel_reconnect(self) -> None:
        if self._reconnect_task is not None and self._reconnect_task is not asyncio.current_task():
            self._reconnect_task.cancel()
        self._reconnect_task = None

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        self._state = state
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception:
                logger.exception("Connection state observer %r failed", observer)

    # ── Event handling ───────────────────────────────────────────────

    def _dispatch(self, event: LiveEvent) -> None:
        try:
            if isinstance(event, ConnectedEvent):
                self._on_connected(event)
            elif isinstance(event, RecordUpdatedEvent):
                self._on_updated(event.record)
            elif isinstance(event, RecordCreatedEvent):
                self._on_created(event.record)
            elif isinstance(event, RecordDeletedEvent):
                self._on_deleted(event.record_id)
            elif isinstance(event, RejectedEvent):
                logger.warning("Ignoring push event '%s': %s", event.event, event.reason)
        except Exception:
            logger.exception("Failed to apply push event %r", event)

    def _on_connected(self, event: ConnectedEvent) -> None:
        logger.info("Live updates connected %s", event.message)
        self._attempts = 0
        self._set_state(ConnectionState.CONNECTED)
        self._notifier.notify(Notice("Live updates connected.", NoticeLevel.INFO, 2.0))

    def _on_updated(self, record: WorkLogRecord) -> None:
        self._remember(record.id, record)
        if record.id in self._store:
            self._store.upsert(record)
            self._notifier.notify(Notice("A work log was updated.", NoticeLevel.INFO))
            return
        # Not in the current view; the active filter may now include it
        logger.debug("Update for unknown record %d; refreshing view", record.id)
        self._spawn(self._refresh())

    def _on_created(self, record: WorkLogRecord) -> None:
        known = self._ledger.get(record.id, _MISSING)
        if known is None:
            logger.debug("Ignoring create for deleted record %d", record.id)
            return
        if known is not _MISSING:
            record = known
        else:
            self._remember(record.id, record)

        if not self._context_provider().matches(record):
            logger.debug("New record %d is outside the active filter", record.id)
            return
        self._store.upsert(record)
        self._notifier.notify(Notice("A new work log was added.", NoticeLevel.INFO))

    def _on_deleted(self, record_id: int) -> None:
        self._remember(record_id, None)
        if record_id not in self._store:
            return
        self._store.remove_by_ids([record_id])
        self._notifier.notify(Notice("A work log was deleted.", NoticeLevel.INFO))

    def _remember(self, record_id: int, record: WorkLogRecord | None) -> None:
        self._ledger[record_id] = record
        self._ledger.move_to_end(record_id)
        while len(self._ledger) > self._ledger_size:
            self._ledger.popitem(last=False)

    async def _refresh(self) -> None:
        try:
            await self._query.fetch_filtered(self._context_provider())
        except TransportError as e:
            logger.warning("Refresh after push event failed: %s", e)

    def _spawn(self, coro: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
