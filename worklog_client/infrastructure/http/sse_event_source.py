"""Server-sent events reader — implements the LiveEventSource interface.

Opens ``GET {base_url}{path}`` as an httpx stream and turns the
``text/event-stream`` body into ``RawEvent`` frames.
"""

import logging
from collections.abc import AsyncIterator

import httpx

from worklog_client.application.interfaces import LiveEventSource
from worklog_client.domain.entities import RawEvent
from worklog_client.domain.exceptions import ChannelError
from worklog_client.infrastructure.http.work_log_api_client import CLIENT_ID_HEADER

logger = logging.getLogger(__name__)

DEFAULT_EVENT = "message"


async def parse_sse_lines(lines: AsyncIterator[str]) -> AsyncIterator[RawEvent]:
    """Group ``event:``/``data:``/``id:`` lines into frames.

    A blank line ends a frame; frames without data are dropped, as is a
    frame left unterminated when the stream ends.
    """
    event: str | None = None
    data: list[str] = []
    event_id: str | None = None

    async for line in lines:
        if not line:
            if data:
                yield RawEvent(event=event or DEFAULT_EVENT, data="\n".join(data), id=event_id)
            event, data = None, []
            continue
        if line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "event":
            event = value
        elif field == "data":
            data.append(value)
        elif field == "id":
            event_id = value or None
        # "retry" and unknown fields are ignored


class SSEEventSource(LiveEventSource):
    """Infrastructure adapter for the backend's push endpoint."""

    def __init__(
        self,
        base_url: str,
        client_id: str,
        path: str = "/api/sse/subscribe",
        http_client: httpx.AsyncClient | None = None,
        connect_timeout: float = 10.0,
    ):
        self._url = f"{base_url.rstrip('/')}{path}"
        self._client_id = client_id
        self._http_client = http_client
        # Reads block until the server pushes; only connecting is bounded
        self._timeout = httpx.Timeout(connect_timeout, read=None)

    def _get_headers(self) -> dict[str, str]:
        return {
            "Accept": "text/event-stream",
            "Cache-Control": "no-cache",
            CLIENT_ID_HEADER: self._client_id,
        }

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def stream(self) -> AsyncIterator[RawEvent]:
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            async with client.stream(
                "GET", self._url, headers=self._get_headers(), timeout=self._timeout
            ) as response:
                if response.status_code != 200:
                    body = await response.aread()
                    raise ChannelError(
                        f"subscription refused: HTTP {response.status_code} "
                        f"{body.decode(errors='replace')[:200]}".rstrip(),
                        status_code=response.status_code,
                    )

                logger.debug("SSE stream open: %s", self._url)
                async for frame in parse_sse_lines(response.aiter_lines()):
                    yield frame

            logger.debug("SSE stream closed by server: %s", self._url)
        except httpx.HTTPError as e:
            raise ChannelError(f"connection lost: {e or type(e).__name__}") from e
        finally:
            if should_close:
                await client.aclose()
