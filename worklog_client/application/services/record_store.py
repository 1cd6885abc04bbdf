"""RecordStore — the in-memory collection the view renders from.

Every writer (fetch, mutation, push) goes through the primitives below;
there is no other way to change the cached records.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from worklog_client.domain.entities import WorkLogRecord

logger = logging.getLogger(__name__)

Snapshot = tuple[WorkLogRecord, ...]
Subscriber = Callable[[Snapshot], Any]


class RecordStore:
    """Ordered, id-unique collection of work-log records.

    Insertion order carries no meaning beyond "new arrivals first"; the view
    derives presentation order from the active sort at render time.
    Subscribers are called synchronously after each effective mutation.
    """

    def __init__(self) -> None:
        self._records: list[WorkLogRecord] = []
        self._subscribers: list[Subscriber] = []

    # ── Queries ──────────────────────────────────────────────────────

    def snapshot(self) -> Snapshot:
        return tuple(self._records)

    def get(self, record_id: int) -> WorkLogRecord | None:
        index = self._index_of(record_id)
        return self._records[index] if index is not None else None

    def __contains__(self, record_id: object) -> bool:
        return any(r.id == record_id for r in self._records)

    def __len__(self) -> int:
        return len(self._records)

    # ── Subscriptions ────────────────────────────────────────────────

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ── Mutation primitives ──────────────────────────────────────────

    def replace_all(self, records: Iterable[WorkLogRecord]) -> None:
        """Install ``records`` as the full contents; duplicate ids keep the last."""
        by_id: dict[int, WorkLogRecord] = {}
        for record in records:
            # dict keeps the first position, takes the latest value
            by_id[record.id] = record
        self._records = list(by_id.values())
        logger.debug("Store replaced: %d record(s)", len(self._records))
        self._notify()

    def upsert(self, record: WorkLogRecord) -> None:
        """Replace in place when the id is known, otherwise prepend."""
        index = self._index_of(record.id)
        if index is None:
            self._records.insert(0, record)
        elif self._records[index] == record:
            return
        else:
            self._records[index] = record
        self._notify()

    def extend(self, records: Iterable[WorkLogRecord]) -> None:
        """Merge a further page: known ids replaced in place, new ids appended."""
        changed = False
        for record in records:
            index = self._index_of(record.id)
            if index is None:
                self._records.append(record)
                changed = True
            elif self._records[index] != record:
                self._records[index] = record
                changed = True
        if changed:
            self._notify()

    def remove_by_ids(self, ids: Iterable[int]) -> None:
        """Drop every record whose id is in ``ids``; unknown ids are ignored."""
        doomed = set(ids)
        kept = [r for r in self._records if r.id not in doomed]
        if len(kept) == len(self._records):
            return
        self._records = kept
        self._notify()

    def apply_status(
        self,
        record_id: int,
        completed: bool,
        actor: str | None,
        timestamp: str,
    ) -> None:
        """Set completion (``timestamp`` or None) and ``completed_by``; no-op if absent."""
        index = self._index_of(record_id)
        if index is None:
            return
        updated = self._records[index].with_status(completed, actor, timestamp)
        if updated == self._records[index]:
            return
        self._records[index] = updated
        self._notify()

    # ── Internals ────────────────────────────────────────────────────

    def _index_of(self, record_id: int) -> int | None:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return None

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Store subscriber %r failed", callback)
