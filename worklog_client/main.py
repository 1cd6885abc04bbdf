"""Client session entry point."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import httpx

from worklog_client.application.interfaces import Notifier, ViewProjector, VisibilityMonitor
from worklog_client.application.services import NoticeBoard, WorkLogController
from worklog_client.config import Settings, get_settings
from worklog_client.domain.exceptions import TransportError
from worklog_client.infrastructure.console_projector import ConsoleProjector
from worklog_client.infrastructure.dependencies import build_controller, create_http_client
from worklog_client.infrastructure.logging import ColoredNotifier, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def session_lifespan(
    settings: Settings | None = None,
    *,
    display: Notifier | None = None,
    projector_factory: Callable[[WorkLogController], ViewProjector] | None = None,
    visibility: VisibilityMonitor | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[WorkLogController]:
    """Session lifespan — connect, load the first view, tear down on exit."""
    settings = settings or get_settings()
    setup_logging(settings)

    display = display or ColoredNotifier()
    board = NoticeBoard(display=display)
    async with create_http_client(settings, transport) as http_client:
        controller = build_controller(
            settings,
            http_client=http_client,
            notifier=board,
            visibility=visibility,
        )
        if isinstance(display, ColoredNotifier):
            controller.channel.add_state_observer(display.connection)
        if projector_factory is not None:
            controller.add_projector(projector_factory(controller))

        try:
            await controller.start()
        except TransportError:
            # Already shown as a notice; the push channel keeps running
            logger.warning("Initial load failed; continuing with an empty view")

        try:
            yield controller
        finally:
            await controller.aclose()
            board.close()
            logger.info("Session closed")


async def run_console(settings: Settings | None = None) -> None:
    """Keep a live table in the terminal until interrupted."""
    async with session_lifespan(
        settings,
        projector_factory=lambda controller: ConsoleProjector(lambda: controller.context),
    ):
        await asyncio.Event().wait()


def main() -> None:
    try:
        asyncio.run(run_console())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
