"""QueryClient — parameterised reads from the backend into the RecordStore."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from worklog_client.application.interfaces import ListParams, Notifier, WorkLogGateway
from worklog_client.application.schemas import WorkLogPage
from worklog_client.application.services.record_store import RecordStore
from worklog_client.domain import date_codec
from worklog_client.domain.entities import (
    Notice,
    NoticeLevel,
    QueryContext,
    SortDirection,
    SortField,
    StatusFilter,
    WorkLogRecord,
)
from worklog_client.domain.exceptions import TransportError

logger = logging.getLogger(__name__)

ERROR_NOTICE_SECONDS = 3.0


class FetchStatus(str, Enum):
    APPLIED = "applied"    # store updated with this response
    STALE = "stale"        # a newer request had already been applied
    INVALID = "invalid"    # input rejected, nothing was sent


@dataclass(frozen=True)
class FetchOutcome:
    status: FetchStatus
    count: int = 0
    total_count: int | None = None
    has_more: bool = False

    @property
    def applied(self) -> bool:
        return self.status is FetchStatus.APPLIED


class QueryClient:
    """Fetches authoritative record sets and installs them into the store.

    Each request is stamped with a sequence number when it is issued. A
    response whose number is lower than the last applied one is dropped, so
    the most recently issued request wins regardless of completion order.
    A failed read never touches the store.

    ``on_context_applied`` is called with the context a ``fetch_filtered``
    call installed, whoever issued it.
    """

    def __init__(
        self,
        gateway: WorkLogGateway,
        store: RecordStore,
        notifier: Notifier,
        *,
        on_context_applied: Callable[[QueryContext], Any] | None = None,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._notifier = notifier
        self._on_context_applied = on_context_applied
        self._issued_seq = 0
        self._applied_seq = 0

    async def fetch_all(
        self,
        sort_field: SortField | None = None,
        sort_direction: SortDirection = SortDirection.ASC,
        status: StatusFilter | None = None,
        *,
        page_size: int | None = None,
    ) -> FetchOutcome:
        """Load the general list and replace the store with it.

        Raises:
            TransportError: If the request fails (the store is left as is).
        """
        params = ListParams(
            sort_field=sort_field,
            sort_direction=sort_direction or SortDirection.ASC,
            status=status,
            page=1 if page_size else None,
            size=page_size,
        )
        seq = self._next_seq()
        page = await self._load(seq, "work logs", self._gateway.list_work_logs(params))
        if page is None:
            return FetchOutcome(FetchStatus.STALE)
        return self._replace(seq, page, page_size)

    async def fetch_by_date(
        self,
        compact_date: str,
        sort_field: SortField | None = None,
        sort_direction: SortDirection | None = None,
        status: StatusFilter | None = None,
        *,
        page_size: int | None = None,
    ) -> FetchOutcome:
        """Load one day's records (``YY.MM.DD``) and replace the store with them.

        An invalid date is reported through the notifier and nothing is
        sent; the outcome is ``INVALID``.

        Raises:
            TransportError: If the request fails (the store is left as is).
        """
        if not date_codec.is_compact_date_only(compact_date) or date_codec.parse_compact(compact_date) is None:
            logger.info("Rejected date filter %r", compact_date)
            self._notifier.notify(
                Notice(
                    f"Invalid date '{compact_date}'. Use the YY.MM.DD format.",
                    NoticeLevel.WARNING,
                    ERROR_NOTICE_SECONDS,
                )
            )
            return FetchOutcome(FetchStatus.INVALID)

        iso_date = date_codec.to_iso_date(compact_date)
        params = ListParams(
            sort_field=sort_field,
            sort_direction=sort_direction or SortDirection.ASC,
            status=status,
            page=1 if page_size else None,
            size=page_size,
        )
        seq = self._next_seq()
        page = await self._load(
            seq,
            f"work logs for {compact_date}",
            self._gateway.list_work_logs_by_date(iso_date, params),
        )
        if page is None:
            return FetchOutcome(FetchStatus.STALE)

        outcome = self._replace(seq, page, page_size)
        if outcome.count:
            message = f"{outcome.count} records found for date {compact_date}"
        else:
            message = f"No records found for date {compact_date}"
        self._notifier.notify(Notice(message, NoticeLevel.INFO))
        return outcome

    async def fetch_filtered(self, context: QueryContext) -> FetchOutcome:
        """Reload the view described by ``context``.

        A date filter routes to the date endpoint; otherwise the general
        list endpoint is used.
        """
        if context.selected_date is not None:
            outcome = await self.fetch_by_date(
                context.selected_date,
                context.sort_field,
                context.sort_direction,
                context.status,
                page_size=context.page_size,
            )
        else:
            outcome = await self.fetch_all(
                context.sort_field,
                context.sort_direction,
                context.status,
                page_size=context.page_size,
            )
        if outcome.applied and self._on_context_applied is not None:
            self._on_context_applied(context.with_page(1))
        return outcome

    async def fetch_next_page(self, context: QueryContext) -> FetchOutcome:
        """Load page ``context.page + 1`` and append it to the store.

        Without a page size there is nothing further to load.
        """
        if not context.page_size:
            return FetchOutcome(FetchStatus.APPLIED, count=len(self._store))

        params = ListParams(
            sort_field=context.sort_field,
            sort_direction=context.sort_direction,
            status=context.status,
            page=context.page + 1,
            size=context.page_size,
        )
        if context.selected_date is not None:
            request = self._gateway.list_work_logs_by_date(
                date_codec.to_iso_date(context.selected_date), params
            )
        else:
            request = self._gateway.list_work_logs(params)

        seq = self._next_seq()
        page = await self._load(seq, "more work logs", request)
        if page is None:
            return FetchOutcome(FetchStatus.STALE)

        records = [r.to_entity() for r in page.records]
        self._applied_seq = seq
        self._store.extend(records)
        logger.debug("Appended page %d: %d record(s)", params.page, len(records))
        return FetchOutcome(
            FetchStatus.APPLIED,
            count=len(records),
            total_count=page.total_count,
            has_more=len(records) >= context.page_size,
        )

    async def fetch_one(self, record_id: int) -> WorkLogRecord:
        """Load a single record and upsert it.

        Raises:
            TransportError: If the request fails.
        """
        schema = await self._gateway.get_work_log(record_id)
        record = schema.to_entity()
        self._store.upsert(record)
        return record

    # ── Internals ────────────────────────────────────────────────────

    def _next_seq(self) -> int:
        self._issued_seq += 1
        return self._issued_seq

    async def _load(self, seq: int, what: str, request) -> WorkLogPage | None:
        """Await ``request``; returns None when its response is already stale."""
        try:
            page = await request
        except TransportError as e:
            if seq < self._applied_seq:
                logger.debug("Ignoring failure of superseded request #%d: %s", seq, e)
                return None
            logger.warning("Failed to load %s: %s", what, e)
            self._notifier.notify(
                Notice(
                    f"Failed to load {what}: {e.message}",
                    NoticeLevel.ERROR,
                    ERROR_NOTICE_SECONDS,
                )
            )
            raise

        if seq < self._applied_seq:
            logger.debug(
                "Discarding stale response #%d (last applied #%d)", seq, self._applied_seq
            )
            return None
        return page

    def _replace(self, seq: int, page: WorkLogPage, page_size: int | None) -> FetchOutcome:
        records = [r.to_entity() for r in page.records]
        self._applied_seq = seq
        self._store.replace_all(records)
        logger.info("Loaded %d work log(s) (request #%d)", len(records), seq)
        return FetchOutcome(
            FetchStatus.APPLIED,
            count=len(self._store),
            total_count=page.total_count,
            has_more=bool(page_size) and len(records) >= page_size,
        )
