"""Abstract REST gateway interface (port) for the work-log backend."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from worklog_client.application.schemas import (
    StatusUpdateResponse,
    UploadResult,
    WorkLogPage,
    WorkLogSchema,
    WorkLogWrite,
)
from worklog_client.domain.entities import SortDirection, SortField, StatusFilter


@dataclass(frozen=True)
class ListParams:
    """Query-string parameters shared by the list and date endpoints."""

    sort_field: SortField | None = None
    sort_direction: SortDirection | None = None
    status: StatusFilter | None = None
    page: int | None = None
    size: int | None = None

    def to_query(self) -> dict[str, str]:
        """Drop unset values, like the browser client's URLSearchParams builder."""
        query: dict[str, str] = {}
        if self.sort_field is not None:
            query["sortField"] = self.sort_field.value
        if self.sort_direction is not None:
            query["sortDirection"] = self.sort_direction.value
        if self.status is not None and self.status is not StatusFilter.ALL:
            query["status"] = self.status.value
        if self.page is not None:
            query["page"] = str(self.page)
        if self.size is not None:
            query["size"] = str(self.size)
        return query


class WorkLogGateway(ABC):
    """Port for the backend REST API — implemented in the infrastructure layer.

    Every method raises ``TransportError`` on a network failure or a
    non-2xx response.
    """

    @abstractmethod
    async def list_work_logs(self, params: ListParams) -> WorkLogPage:
        """GET /api/worklogs"""
        ...

    @abstractmethod
    async def list_work_logs_by_date(self, iso_date: str, params: ListParams) -> WorkLogPage:
        """GET /api/worklogs/date/{iso_date}"""
        ...

    @abstractmethod
    async def get_work_log(self, record_id: int) -> WorkLogSchema:
        """GET /api/worklogs/{id}"""
        ...

    @abstractmethod
    async def create_work_log(self, body: WorkLogWrite) -> dict:
        """POST /api/worklogs — returns the raw JSON body of the response."""
        ...

    @abstractmethod
    async def update_work_log(self, record_id: int, body: WorkLogWrite) -> dict | None:
        """PUT /api/worklogs/{id} — returns the JSON body, or None when empty."""
        ...

    @abstractmethod
    async def update_status(self, record_id: int, completed: bool) -> StatusUpdateResponse:
        """PUT /api/worklogs/{id}/status"""
        ...

    @abstractmethod
    async def delete_work_log(self, record_id: int) -> None:
        """DELETE /api/worklogs/{id}"""
        ...

    @abstractmethod
    async def upload_batch(self, filename: str, content: bytes, car_model: str) -> UploadResult:
        """POST /excel/upload (multipart)."""
        ...
