"""Pydantic DTOs (Data Transfer Objects) for the work-log REST contract.

The backend speaks camelCase JSON; these models accept either alias or
field name and convert to and from the ``WorkLogRecord`` domain entity.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel

from worklog_client.domain import date_codec
from worklog_client.domain.entities import WorkLogRecord

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


class WorkLogSchema(BaseModel):
    """A record as returned by the list, date, detail and push payloads."""

    id: int
    work_datetime: str
    car_model: str = Field(..., min_length=1)
    product_color: str | None = None
    product_code: str | None = None
    product_name: str | None = None
    quantity: int = Field(0, ge=0)
    completed: bool | None = None
    completed_at: str | None = None
    completed_by: str | None = None
    created_at: str | None = None

    model_config = _CAMEL

    @field_validator("work_datetime", mode="before")
    @classmethod
    def _normalize_work_datetime(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("workDatetime must be a string")
        compact = date_codec.iso_to_display(value)
        if date_codec.parse_compact(compact) is None:
            raise ValueError(f"unrecognised workDatetime {value!r}")
        return compact

    @field_validator("quantity", mode="before")
    @classmethod
    def _default_quantity(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("completed_at", "created_at", mode="before")
    @classmethod
    def _validate_iso(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        if date_codec.parse_iso_datetime(value) is None:
            raise ValueError(f"not an ISO datetime: {value!r}")
        return value

    @model_validator(mode="after")
    def _reconcile_completion(self) -> "WorkLogSchema":
        # List responses may only carry the boolean flag
        if self.completed and self.completed_at is None:
            self.completed_at = date_codec.format_iso_datetime(datetime.now())
        elif self.completed is False:
            self.completed_at = None

        # completedAt is never in the future
        completed = date_codec.parse_iso_datetime(self.completed_at)
        if completed is not None:
            now = datetime.now(completed.tzinfo)
            if completed > now:
                self.completed_at = date_codec.format_iso_datetime(now)
        return self

    def to_entity(self) -> WorkLogRecord:
        return WorkLogRecord(
            id=self.id,
            work_datetime=self.work_datetime,
            car_model=self.car_model,
            quantity=self.quantity,
            product_color=self.product_color,
            product_code=self.product_code,
            product_name=self.product_name,
            completed_at=self.completed_at,
            completed_by=self.completed_by,
            created_at=self.created_at,
        )


class WorkLogWrite(BaseModel):
    """Request body for create (POST) and full update (PUT)."""

    work_datetime: str
    car_model: str = Field(..., min_length=1)
    product_color: str | None = None
    product_code: str | None = None
    product_name: str | None = None
    quantity: int = Field(0, ge=0)

    model_config = _CAMEL

    @field_validator("work_datetime")
    @classmethod
    def _require_compact(cls, value: str) -> str:
        if date_codec.parse_compact(value) is None:
            raise ValueError("workDatetime must be YY.MM.DD HH:MM")
        return value

    @classmethod
    def from_entity(cls, record: WorkLogRecord) -> "WorkLogWrite":
        return cls(
            work_datetime=record.work_datetime,
            car_model=record.car_model,
            product_color=record.product_color,
            product_code=record.product_code,
            product_name=record.product_name,
            quantity=record.quantity,
        )

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class CreatedResponse(BaseModel):
    """Creation response — either the full record or just ``{"id": ...}``."""

    id: int

    model_config = {"extra": "allow"}


class StatusUpdateRequest(BaseModel):
    completed: bool


class StatusUpdateResponse(BaseModel):
    message: str = ""
    completed: bool | None = None

    model_config = {"extra": "ignore"}


class UploadResult(BaseModel):
    """Outcome of a batch (spreadsheet) import."""

    success: bool = False
    message: str | None = None
    redirect_url: str | None = None


class WorkLogPage(BaseModel):
    """A decoded list response."""

    records: list[WorkLogSchema]
    total_count: int | None = None


_RECORD_LIST = TypeAdapter(list[WorkLogSchema])


def parse_work_log_list(data: Any) -> WorkLogPage:
    """Decode a list response: a bare array or a ``{"workLogs": [...]}`` envelope.

    Raises:
        pydantic.ValidationError: If any record fails validation, or the
            body has neither shape.
    """
    if isinstance(data, dict) and "workLogs" in data:
        total = data.get("totalCount")
        return WorkLogPage(
            records=_RECORD_LIST.validate_python(data["workLogs"]),
            total_count=total if isinstance(total, int) else None,
        )
    return WorkLogPage(records=_RECORD_LIST.validate_python(data))
