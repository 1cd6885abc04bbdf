"""Work-log REST client — implements the WorkLogGateway interface.

Communicates with the work-plan backend over httpx. Every failure, whether
a network error, a non-2xx status or an undecodable body, surfaces as a
``TransportError`` carrying the server's own message when it sent one.
"""

import logging
from typing import Any

import httpx
import pydantic

from worklog_client.application.interfaces import ListParams, WorkLogGateway
from worklog_client.application.schemas import (
    StatusUpdateRequest,
    StatusUpdateResponse,
    UploadResult,
    WorkLogPage,
    WorkLogSchema,
    WorkLogWrite,
    parse_work_log_list,
)
from worklog_client.domain.exceptions import TransportError

logger = logging.getLogger(__name__)

CLIENT_ID_HEADER = "X-Client-ID"


class WorkLogApiClient(WorkLogGateway):
    """Infrastructure adapter — connects to the work-log REST API.

    Pass a shared ``httpx.AsyncClient`` for connection pooling; without one
    a short-lived client is created per request.
    """

    def __init__(
        self,
        base_url: str,
        client_id: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        upload_timeout: float = 120.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._client_id = client_id
        self._http_client = http_client
        self._timeout = timeout
        self._upload_timeout = upload_timeout

    def _get_headers(self, mutating: bool = False) -> dict[str, str]:
        """Standard headers; writes also carry the session's client id."""
        headers = {"Accept": "application/json"}
        if mutating:
            headers[CLIENT_ID_HEADER] = self._client_id
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    # ── Reads ────────────────────────────────────────────────────────

    async def list_work_logs(self, params: ListParams) -> WorkLogPage:
        response = await self._request("GET", "/api/worklogs", params=params.to_query())
        return self._parse_page(response)

    async def list_work_logs_by_date(self, iso_date: str, params: ListParams) -> WorkLogPage:
        response = await self._request(
            "GET", f"/api/worklogs/date/{iso_date}", params=params.to_query()
        )
        return self._parse_page(response)

    async def get_work_log(self, record_id: int) -> WorkLogSchema:
        response = await self._request("GET", f"/api/worklogs/{record_id}")
        data = self._json(response)
        try:
            return WorkLogSchema.model_validate(data)
        except pydantic.ValidationError as e:
            raise self._malformed(response, e) from e

    # ── Writes ───────────────────────────────────────────────────────

    async def create_work_log(self, body: WorkLogWrite) -> dict:
        response = await self._request(
            "POST", "/api/worklogs", mutating=True, json=body.to_body()
        )
        data = self._json(response)
        if not isinstance(data, dict):
            raise TransportError(
                "POST", str(response.request.url), "creation response is not an object",
                response.status_code,
            )
        return data

    async def update_work_log(self, record_id: int, body: WorkLogWrite) -> dict | None:
        response = await self._request(
            "PUT", f"/api/worklogs/{record_id}", mutating=True, json=body.to_body()
        )
        if not response.content:
            return None
        try:
            data = response.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    async def update_status(self, record_id: int, completed: bool) -> StatusUpdateResponse:
        response = await self._request(
            "PUT",
            f"/api/worklogs/{record_id}/status",
            mutating=True,
            json=StatusUpdateRequest(completed=completed).model_dump(),
        )
        if not response.content:
            return StatusUpdateResponse()
        try:
            data = response.json()
        except ValueError:
            return StatusUpdateResponse(message=response.text)
        if not isinstance(data, dict):
            return StatusUpdateResponse()
        return StatusUpdateResponse.model_validate(data)

    async def delete_work_log(self, record_id: int) -> None:
        await self._request("DELETE", f"/api/worklogs/{record_id}", mutating=True)

    async def upload_batch(self, filename: str, content: bytes, car_model: str) -> UploadResult:
        """Multipart upload. A redirect answer counts as success."""
        response = await self._request(
            "POST",
            "/excel/upload",
            mutating=True,
            files={"file": (filename, content)},
            data={"carModel": car_model},
            timeout=self._upload_timeout,
            allow_redirect=True,
        )

        if response.is_redirect:
            return UploadResult(success=True, redirect_url=response.headers.get("location"))
        if response.history:
            return UploadResult(success=True, redirect_url=str(response.url))

        data = self._json(response)
        if not isinstance(data, dict):
            raise TransportError(
                "POST", str(response.request.url), "unexpected upload response",
                response.status_code,
            )
        return UploadResult.model_validate(data)

    # ── Internals ────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        mutating: bool = False,
        allow_redirect: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request; raise TransportError unless it succeeded."""
        url = f"{self._base_url}{path}"
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.request(
                method, url, headers=self._get_headers(mutating), **kwargs
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(method, url, str(e) or type(e).__name__) from e
        finally:
            if should_close:
                await client.aclose()

        logger.debug("%s %s -> %d", method, url, response.status_code)
        if response.is_success or (allow_redirect and response.is_redirect):
            return response
        self._raise_transport_error(method, url, response)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                response.request.method,
                str(response.request.url),
                "response is not valid JSON",
                response.status_code,
            ) from e

    def _parse_page(self, response: httpx.Response) -> WorkLogPage:
        data = self._json(response)
        try:
            return parse_work_log_list(data)
        except pydantic.ValidationError as e:
            raise self._malformed(response, e) from e

    @staticmethod
    def _malformed(response: httpx.Response, error: pydantic.ValidationError) -> TransportError:
        return TransportError(
            response.request.method,
            str(response.request.url),
            f"malformed response: {error.error_count()} validation error(s)",
            response.status_code,
        )

    @staticmethod
    def _raise_transport_error(method: str, url: str, response: httpx.Response) -> None:
        """Raise TransportError from a non-2xx httpx Response."""
        message = response.reason_phrase or f"HTTP {response.status_code}"
        try:
            data = response.json()
            if isinstance(data, dict):
                message = data.get("message") or data.get("error") or message
        except ValueError:
            if response.text:
                message = response.text

        raise TransportError(method, url, message, response.status_code)
