"""WorkLogController — owns the query context and wires the sync components."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from worklog_client.application.interfaces import (
    LiveEventSource,
    Notifier,
    ViewProjector,
    VisibilityMonitor,
    WorkLogGateway,
)
from worklog_client.application.services.live_update_channel import LiveUpdateChannel
from worklog_client.application.services.mutation_client import MutationClient, UpdatePolicy
from worklog_client.application.services.query_client import FetchOutcome, FetchStatus, QueryClient
from worklog_client.application.services.record_store import RecordStore
from worklog_client.domain.entities import QueryContext, SortDirection, SortField, StatusFilter
from worklog_client.domain.exceptions import TransportError

logger = logging.getLogger(__name__)


class WorkLogController:
    """Single owner of the list view's state.

    Two immutable ``QueryContext`` values are kept. ``context`` is the one
    the visible rows were loaded with and changes only when a fetch for it
    has been applied to the store. ``requested_context`` is the one the
    user asked for last; push-driven and follow-up refreshes load it, so a
    background refresh never undoes a filter change still in flight.
    """

    def __init__(
        self,
        gateway: WorkLogGateway,
        event_source: LiveEventSource,
        notifier: Notifier,
        *,
        client_id: str,
        context: QueryContext | None = None,
        update_policy: UpdatePolicy = UpdatePolicy.REFETCH,
        visibility: VisibilityMonitor | None = None,
        reconnect_base_delay: float = 2.0,
        max_reconnect_attempts: int = 5,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._context = context or QueryContext()
        self._requested = self._context
        self.client_id = client_id
        self.store = RecordStore()
        self.query = QueryClient(
            gateway, self.store, notifier, on_context_applied=self._commit
        )
        self.mutations = MutationClient(
            gateway,
            self.store,
            self.query,
            notifier,
            client_id=client_id,
            context_provider=self._get_requested,
            update_policy=update_policy,
            clock=clock,
        )
        self.channel = LiveUpdateChannel(
            event_source,
            self.store,
            self.query,
            notifier,
            context_provider=self._get_requested,
            visibility=visibility,
            base_delay=reconnect_base_delay,
            max_attempts=max_reconnect_attempts,
            sleep=sleep,
        )
        self._remove_visibility: Callable[[], None] | None = None
        if visibility is not None:
            self._remove_visibility = visibility.add_observer(self.visibility_changed)

    @property
    def context(self) -> QueryContext:
        return self._context

    @property
    def requested_context(self) -> QueryContext:
        return self._requested

    def _get_requested(self) -> QueryContext:
        return self._requested

    def add_projector(self, projector: ViewProjector) -> Callable[[], None]:
        """Render every store change (and connection change) through ``projector``."""
        remove_render = self.store.subscribe(projector.render)
        remove_state = self.channel.add_state_observer(projector.connection_changed)
        projector.render(self.store.snapshot())

        def remove() -> None:
            remove_render()
            remove_state()

        return remove

    async def start(self) -> FetchOutcome:
        """Open the push channel and load the first view."""
        self.channel.connect()
        return await self.reload()

    async def reload(self) -> FetchOutcome:
        """Reload the most recently requested view."""
        return await self.query.fetch_filtered(self._requested)

    async def select_date(self, compact_date: str) -> FetchOutcome:
        """Filter to one ``YY.MM.DD`` day; an invalid date leaves everything as is."""
        return await self._apply(self._requested.with_date(compact_date))

    async def clear_date(self) -> FetchOutcome:
        return await self._apply(self._requested.with_date(None))

    async def set_status(self, status: StatusFilter) -> FetchOutcome:
        return await self._apply(self._requested.with_status(status))

    async def set_sort(
        self, field: SortField, direction: SortDirection | None = None
    ) -> FetchOutcome:
        """Sort by ``field``; without a direction, re-selecting a field flips it."""
        base = self._requested
        if direction is None:
            if field is base.sort_field:
                direction = base.sort_direction.toggled()
            else:
                direction = SortDirection.ASC
        return await self._apply(base.with_sort(field, direction))

    async def load_more(self) -> FetchOutcome:
        """Append the next page when paging is enabled.

        Nothing is loaded while a filter or sort change is still in flight;
        that fetch replaces the rows anyway.
        """
        context = self._context
        if self._requested != context.with_page(1):
            logger.debug("Skipping next page: view change to %s pending", self._requested)
            return FetchOutcome(FetchStatus.STALE)
        outcome = await self.query.fetch_next_page(context)
        if outcome.applied and outcome.count and context.page_size:
            self._context = context.with_page(context.page + 1)
        return outcome

    def visibility_changed(self, visible: bool) -> None:
        if visible:
            self.channel.resume()

    async def aclose(self) -> None:
        if self._remove_visibility is not None:
            self._remove_visibility()
            self._remove_visibility = None
        await self.channel.close()

    async def _apply(self, context: QueryContext) -> FetchOutcome:
        self._requested = context
        try:
            outcome = await self.query.fetch_filtered(context)
        except TransportError:
            self._withdraw(context)
            raise
        if outcome.status is FetchStatus.INVALID:
            self._withdraw(context)
        return outcome

    def _withdraw(self, context: QueryContext) -> None:
        # A later request may already have replaced this one
        if self._requested is context:
            self._requested = self._context

    def _commit(self, context: QueryContext) -> None:
        self._context = context
        logger.debug("Query context now %s", context)
