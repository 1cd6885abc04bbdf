"""MutationClient — create / update / status / delete / import against the backend.

The store is only changed after the server confirmed a write, and only
through RecordStore primitives. Writes are never retried automatically;
the caller decides what to do with a raised ``TransportError``.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum

import pydantic

from worklog_client.application.interfaces import Notifier, WorkLogGateway
from worklog_client.application.schemas import (
    CreatedResponse,
    UploadResult,
    WorkLogSchema,
    WorkLogWrite,
)
from worklog_client.application.services.query_client import QueryClient
from worklog_client.application.services.record_store import RecordStore
from worklog_client.domain import date_codec
from worklog_client.domain.entities import Notice, NoticeLevel, QueryContext, WorkLogRecord
from worklog_client.domain.exceptions import BatchDeleteError, TransportError

logger = logging.getLogger(__name__)

ERROR_NOTICE_SECONDS = 3.0
UPLOAD_NOTICE_SECONDS = 10.0
GENERIC_UPLOAD_ERROR = "An error occurred while uploading the file."


class UpdatePolicy(str, Enum):
    """What to do with the store after a successful full update."""

    REFETCH = "refetch"                # reload the current view
    TRUST_RESPONSE = "trust_response"  # upsert the PUT body when it is a full record


class MutationClient:
    """Issues write requests and applies confirmed results to the store."""

    def __init__(
        self,
        gateway: WorkLogGateway,
        store: RecordStore,
        query_client: QueryClient,
        notifier: Notifier,
        *,
        client_id: str,
        context_provider: Callable[[], QueryContext],
        update_policy: UpdatePolicy = UpdatePolicy.REFETCH,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._query = query_client
        self._notifier = notifier
        self._client_id = client_id
        self._context_provider = context_provider
        self._update_policy = update_policy
        self._clock = clock

    async def create(self, draft: WorkLogWrite) -> WorkLogRecord:
        """Create a record and upsert the server's version of it.

        Raises:
            TransportError: If the backend rejects the request.
        """
        try:
            data = await self._gateway.create_work_log(draft)
        except TransportError as e:
            self._fail("Failed to create work log", e)
            raise

        record = self._created_record(draft, data)
        self._store.upsert(record)
        logger.info("Created work log %d", record.id)
        self._notifier.notify(Notice("Work log created.", NoticeLevel.SUCCESS))
        return record

    async def update(self, record: WorkLogRecord) -> None:
        """Send a full update, then refresh the store per the update policy.

        Raises:
            TransportError: If the update itself fails. A failing follow-up
                refresh is logged, not raised.
        """
        try:
            data = await self._gateway.update_work_log(record.id, WorkLogWrite.from_entity(record))
        except TransportError as e:
            self._fail("Failed to update work log", e)
            raise

        logger.info("Updated work log %d", record.id)
        self._notifier.notify(Notice("Work log updated.", NoticeLevel.SUCCESS))

        if self._update_policy is UpdatePolicy.TRUST_RESPONSE:
            confirmed = self._full_record(data)
            if confirmed is not None:
                self._store.upsert(confirmed)
                return
            logger.debug("Update response for %d is not a full record; refetching", record.id)
        await self.refresh()

    async def update_status(self, record_id: int, completed: bool) -> str:
        """Toggle completion on the server, then in the store.

        Returns:
            The server's human-readable message.

        Raises:
            TransportError: If the backend rejects the request.
        """
        try:
            response = await self._gateway.update_status(record_id, completed)
        except TransportError as e:
            self._fail("Failed to change status", e)
            raise

        timestamp = date_codec.format_iso_datetime(self._clock())
        self._store.apply_status(record_id, completed, self._client_id, timestamp)
        message = response.message or (
            "Marked as completed." if completed else "Marked as not completed."
        )
        self._notifier.notify(Notice(message, NoticeLevel.SUCCESS))
        return message

    async def update_with_status(self, record: WorkLogRecord, completed: bool) -> str:
        """Edit a record and set its completion, strictly in that order.

        The status request is only sent after the update succeeded.
        """
        await self.update(record)
        return await self.update_status(record.id, completed)

    async def delete_many(self, ids: list[int]) -> None:
        """Delete ``ids`` with one concurrent request each, all-or-nothing locally.

        Raises:
            BatchDeleteError: If any single delete failed. Nothing is removed
                from the store in that case, even for ids the server did
                delete.
        """
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return

        results = await asyncio.gather(
            *(self._gateway.delete_work_log(record_id) for record_id in unique_ids),
            return_exceptions=True,
        )
        failed = [i for i, r in zip(unique_ids, results) if isinstance(r, Exception)]
        if failed:
            succeeded = [i for i in unique_ids if i not in failed]
            first_error = next(r for r in results if isinstance(r, Exception))
            logger.warning(
                "Batch delete failed for %s; server may already have deleted %s",
                failed,
                succeeded,
            )
            self._notifier.notify(
                Notice(
                    "Some items could not be deleted.",
                    NoticeLevel.ERROR,
                    ERROR_NOTICE_SECONDS,
                )
            )
            raise BatchDeleteError(
                failed_ids=failed,
                succeeded_ids=succeeded,
                message=str(first_error),
            ) from first_error

        self._store.remove_by_ids(unique_ids)
        logger.info("Deleted %d work log(s)", len(unique_ids))
        self._notifier.notify(Notice("Selected work logs were deleted.", NoticeLevel.SUCCESS))

    async def import_batch(self, filename: str, content: bytes, car_model: str) -> UploadResult:
        """Upload a spreadsheet of work logs for ``car_model`` and reload on success.

        Raises:
            TransportError: If the upload fails; its message is the server's
                own message when it sent one.
        """
        self._notifier.notify(
            Notice("Uploading file...", NoticeLevel.INFO, UPLOAD_NOTICE_SECONDS)
        )
        try:
            result = await self._gateway.upload_batch(filename, content, car_model)
        except TransportError as e:
            self._fail("Upload failed", e)
            raise

        if not result.success:
            message = result.message or GENERIC_UPLOAD_ERROR
            self._notifier.notify(Notice(message, NoticeLevel.ERROR, ERROR_NOTICE_SECONDS))
            raise TransportError("POST", "/excel/upload", message, status_code=200)

        logger.info("Imported %s for %s", filename, car_model)
        self._notifier.notify(
            Notice(result.message or "File uploaded successfully.", NoticeLevel.SUCCESS)
        )
        await self.refresh()
        return result

    async def refresh(self) -> None:
        """Best-effort reload of the current view; failures are only logged."""
        try:
            await self._query.fetch_filtered(self._context_provider())
        except TransportError as e:
            logger.warning("Follow-up refresh failed: %s", e)

    # ── Internals ────────────────────────────────────────────────────

    def _fail(self, what: str, error: TransportError) -> None:
        logger.warning("%s: %s", what, error)
        self._notifier.notify(
            Notice(f"{what}: {error.message}", NoticeLevel.ERROR, ERROR_NOTICE_SECONDS)
        )

    @staticmethod
    def _full_record(data: dict | None) -> WorkLogRecord | None:
        if not isinstance(data, dict):
            return None
        try:
            return WorkLogSchema.model_validate(data).to_entity()
        except pydantic.ValidationError:
            return None

    def _created_record(self, draft: WorkLogWrite, data: dict) -> WorkLogRecord:
        full = self._full_record(data)
        if full is not None:
            return full
        # Backend answered with just {"id": ...}
        try:
            record_id = CreatedResponse.model_validate(data).id
        except pydantic.ValidationError as e:
            raise TransportError(
                "POST", "/api/worklogs", f"creation response has no id: {data!r}"
            ) from e
        return WorkLogRecord(
            id=record_id,
            work_datetime=draft.work_datetime,
            car_model=draft.car_model,
            quantity=draft.quantity,
            product_color=draft.product_color,
            product_code=draft.product_code,
            product_name=draft.product_name,
        )
