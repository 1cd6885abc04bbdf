"""Wires infrastructure adapters to the application layer."""

import httpx

from worklog_client.application.interfaces import Notifier, VisibilityMonitor
from worklog_client.application.services import WorkLogController
from worklog_client.config import Settings, get_settings
from worklog_client.domain.entities import QueryContext
from worklog_client.infrastructure.http import SSEEventSource, WorkLogApiClient
from worklog_client.infrastructure.session import ClientSession


def create_http_client(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Shared connection pool for the REST and push adapters."""
    settings = settings or get_settings()
    return httpx.AsyncClient(timeout=settings.request_timeout, transport=transport)


def initial_context(settings: Settings) -> QueryContext:
    return QueryContext(
        sort_field=settings.default_sort_field,
        sort_direction=settings.default_sort_direction,
        page_size=settings.page_size,
    )


def build_controller(
    settings: Settings | None = None,
    *,
    http_client: httpx.AsyncClient,
    notifier: Notifier,
    visibility: VisibilityMonitor | None = None,
    session: ClientSession | None = None,
) -> WorkLogController:
    """Provides a WorkLogController with its gateway and push source wired up.

    The caller owns ``http_client`` and closes it after the controller.
    """
    settings = settings or get_settings()
    session = session or ClientSession()

    gateway = WorkLogApiClient(
        base_url=settings.base_url,
        client_id=session.client_id,
        http_client=http_client,
        timeout=settings.request_timeout,
        upload_timeout=settings.upload_timeout,
    )
    event_source = SSEEventSource(
        base_url=settings.base_url,
        client_id=session.client_id,
        path=settings.sse_path,
        http_client=http_client,
    )
    return WorkLogController(
        gateway,
        event_source,
        notifier,
        client_id=session.client_id,
        context=initial_context(settings),
        update_policy=settings.update_policy,
        visibility=visibility,
        reconnect_base_delay=settings.reconnect_base_delay,
        max_reconnect_attempts=settings.max_reconnect_attempts,
    )
