"""Domain value object — the filter/sort/pagination state of the list view."""

from dataclasses import dataclass, replace
from enum import Enum

from worklog_client.domain.entities.work_log import WorkLogRecord


class StatusFilter(str, Enum):
    """Completion filter; COMPLETED and INCOMPLETE never overlap."""

    ALL = "all"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"

    def matches(self, record: WorkLogRecord) -> bool:
        if self is StatusFilter.COMPLETED:
            return record.is_complete
        if self is StatusFilter.INCOMPLETE:
            return not record.is_complete
        return True


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    def toggled(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


class SortField(str, Enum):
    """Sortable columns, valued by their wire (camelCase) names."""

    WORK_DATETIME = "workDatetime"
    CAR_MODEL = "carModel"
    PRODUCT_COLOR = "productColor"
    PRODUCT_CODE = "productCode"
    PRODUCT_NAME = "productName"
    QUANTITY = "quantity"
    CREATED_AT = "createdAt"

    @property
    def attribute(self) -> str:
        """Matching WorkLogRecord attribute name."""
        return {
            SortField.WORK_DATETIME: "work_datetime",
            SortField.CAR_MODEL: "car_model",
            SortField.PRODUCT_COLOR: "product_color",
            SortField.PRODUCT_CODE: "product_code",
            SortField.PRODUCT_NAME: "product_name",
            SortField.QUANTITY: "quantity",
            SortField.CREATED_AT: "created_at",
        }[self]


@dataclass(frozen=True)
class QueryContext:
    """Immutable query parameters held by the owning controller.

    ``selected_date`` is a compact ``YY.MM.DD`` date or None. ``page_size``
    of None means the backend's full list is requested in one go.
    """

    sort_field: SortField = SortField.WORK_DATETIME
    sort_direction: SortDirection = SortDirection.ASC
    status: StatusFilter = StatusFilter.ALL
    selected_date: str | None = None
    page_size: int | None = None
    page: int = 1

    @property
    def has_date_filter(self) -> bool:
        return self.selected_date is not None

    def matches(self, record: WorkLogRecord) -> bool:
        """Whether ``record`` belongs in the view this context describes."""
        if self.selected_date is not None and record.work_date != self.selected_date:
            return False
        return self.status.matches(record)

    def with_date(self, compact_date: str | None) -> "QueryContext":
        return replace(self, selected_date=compact_date, page=1)

    def with_status(self, status: StatusFilter) -> "QueryContext":
        return replace(self, status=status, page=1)

    def with_sort(self, field: SortField, direction: SortDirection) -> "QueryContext":
        return replace(self, sort_field=field, sort_direction=direction, page=1)

    def with_page(self, page: int) -> "QueryContext":
        return replace(self, page=page)
