"""Shared fixtures for the format URL and fetch tests."""

import asyncio
import socket
import threading
import time
from collections.abc import Generator
from contextlib import closing

import pytest
from aiohttp import web

from urlfmt import FormatURL
from urlfmt.common.request_manager import RequestManager
from urlfmt.config import FetchConfig

from tests.mock_server import create_app

STEAM_APP_PAGE = FormatURL("%s://store.steampowered.com/app/%d")
ITCH_IO_GAME_PAGE = FormatURL("%s://%s.itch.io/%s")
STEAM_APP_REVIEWS = FormatURL(
    "%s://store.steampowered.com/appreviews/%d?json=1&cursor=%s"
    "&language=%s&day_range=9223372036854775807&num_per_page=%d"
    "&review_type=all&purchase_type=%s&filter=%s&start_date=%d"
    "&end_date=%d&date_range_type=%s"
)


@pytest.fixture
def steam_app_page() -> FormatURL:
    """Steam store page for an app id."""
    return STEAM_APP_PAGE


@pytest.fixture
def itch_io_game_page() -> FormatURL:
    """itch.io page for a developer and game slug."""
    return ITCH_IO_GAME_PAGE


@pytest.fixture
def steam_app_reviews() -> FormatURL:
    """Steam review API query with nine arguments."""
    return STEAM_APP_REVIEWS


# =============================================================================
# aiohttp test server fixtures
# =============================================================================


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class AioHttpTestServer:
    """Wrapper to run aiohttp server in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        """Start the server in a background thread."""
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        self._started.wait(timeout=5.0)
        # Give the listening socket a moment to accept connections
        time.sleep(0.05)

    def _run_server(self) -> None:
        """Run the server in an asyncio event loop."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._started.set()
        self._loop.run_forever()

    def stop(self) -> None:
        """Stop the server and clean up resources."""
        if self._loop and self._runner:

            async def cleanup() -> None:
                if self._runner is not None:
                    await self._runner.cleanup()

            future = asyncio.run_coroutine_threadsafe(cleanup(), self._loop)
            try:
                future.result(timeout=2.0)
            except Exception:
                pass  # Best effort cleanup

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


@pytest.fixture
def store_server() -> Generator[AioHttpTestServer, None, None]:
    """Create and start an aiohttp test server running the game store app.

    Yields:
        AioHttpTestServer instance with the store app running.
    """
    server = AioHttpTestServer(create_app(), find_free_port())
    server.start()
    yield server
    server.stop()


@pytest.fixture
def server_url(store_server: AioHttpTestServer) -> str:
    """Get the base URL of the test server."""
    return store_server.url


@pytest.fixture
def manager() -> Generator[RequestManager, None, None]:
    """A RequestManager with a short timeout, closed after the test."""
    with RequestManager(FetchConfig(timeout=5.0)) as request_manager:
        yield request_manager
