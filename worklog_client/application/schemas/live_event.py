"""Decoding of raw push frames into typed domain events."""

import json

import pydantic
from pydantic import BaseModel

from worklog_client.application.schemas.work_log import WorkLogSchema
from worklog_client.domain.entities import (
    ConnectedEvent,
    LiveEvent,
    RawEvent,
    RecordCreatedEvent,
    RecordDeletedEvent,
    RecordUpdatedEvent,
    RejectedEvent,
    ServerErrorEvent,
)


# Event names emitted by /api/sse/subscribe
EVENT_CONNECT = "connect"
EVENT_UPDATED = "worklog-updated"
EVENT_CREATED = "worklog-created"
EVENT_DELETED = "worklog-deleted"
EVENT_ERROR = "error"


class DeletedPayload(BaseModel):
    id: int


def decode_live_event(raw: RawEvent) -> LiveEvent:
    """Decode one frame. Never raises; malformed frames become RejectedEvent."""
    if raw.event == EVENT_CONNECT:
        return ConnectedEvent(message=raw.data)
    if raw.event == EVENT_ERROR:
        return ServerErrorEvent(message=raw.data)
    if raw.event not in (EVENT_CREATED, EVENT_UPDATED, EVENT_DELETED):
        return RejectedEvent(raw.event, raw.data, f"unknown event '{raw.event}'")

    try:
        payload = json.loads(raw.data)
    except json.JSONDecodeError as e:
        return RejectedEvent(raw.event, raw.data, f"invalid JSON: {e.msg}")

    try:
        if raw.event == EVENT_DELETED:
            return RecordDeletedEvent(DeletedPayload.model_validate(payload).id)

        record = WorkLogSchema.model_validate(payload).to_entity()
    except pydantic.ValidationError as e:
        return RejectedEvent(raw.event, raw.data, f"invalid payload: {e.error_count()} error(s)")

    if raw.event == EVENT_CREATED:
        return RecordCreatedEvent(record)
    return RecordUpdatedEvent(record)
