from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

import pytest
import websockets

from paddy_remote.config import LinkConfig
from paddy_remote.services.link_client import LinkState, PaddyLinkClient

pytest_plugins = ["nicegui.testing.user_plugin"]


if TYPE_CHECKING:
    from collections.abc import AsyncIterator

_CLOSED = object()


class FakeConnection:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self, close_delay: float = 0.0) -> None:
        self.sent: list[str] = []
        self.closed = False
        # Set once close() has finished releasing the socket
        self.released = False
        self.close_delay = close_delay
        self._incoming: asyncio.Queue[Any] = asyncio.Queue()

    @property
    def sent_json(self) -> list[dict]:
        return [json.loads(s) for s in self.sent]

    def feed(self, message: str | bytes) -> None:
        """Deliver a frame from the device side."""
        self._incoming.put_nowait(message)

    def drop(self) -> None:
        """Simulate the device closing the connection."""
        self._incoming.put_nowait(_CLOSED)

    async def send(self, data: str) -> None:
        if self.closed:
            raise websockets.ConnectionClosedOK(None, None)
        self.sent.append(data)

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._incoming.put_nowait(_CLOSED)
        if self.close_delay:
            await asyncio.sleep(self.close_delay)
        self.released = True

    def __aiter__(self) -> FakeConnection:
        return self

    async def __anext__(self) -> Any:
        item = await self._incoming.get()
        if item is _CLOSED:
            self.closed = True
            raise StopAsyncIteration
        return item


class FakeDevice:
    """Connector that hands out FakeConnections, or refuses while unreachable."""

    def __init__(self) -> None:
        self.reachable = True
        self.attempts = 0
        self.connections: list[FakeConnection] = []
        self.close_delay = 0.0

    async def connect(self, url: str) -> FakeConnection:
        self.attempts += 1
        if not self.reachable:
            raise ConnectionRefusedError(f"refused: {url}")
        conn = FakeConnection(self.close_delay)
        self.connections.append(conn)
        return conn

    @property
    def live(self) -> list[FakeConnection]:
        return [c for c in self.connections if not c.closed]

    @property
    def last(self) -> FakeConnection:
        return self.connections[-1]


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
async def link(device: FakeDevice) -> AsyncIterator[PaddyLinkClient]:
    """Link client wired to the fake device with a short reconnect delay."""
    client = PaddyLinkClient(
        LinkConfig(url="ws://paddy.test:81", reconnect_delay_s=0.02),
        connector=device.connect,
    )
    try:
        yield client
    finally:
        client.close()
        await client.wait_closed()


class RecorderLink:
    """Records link operations for UI tests without any transport."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.url = "ws://paddy.test:81"
        self.state = LinkState.IDLE
        self.camera_streaming = False

    def is_open(self) -> bool:
        return self.state is LinkState.OPEN

    def connect(self) -> None:
        self.calls.append(("connect",))

    def __getattr__(self, name: str):
        if not name.startswith("send_"):
            raise AttributeError(name)

        def _record(*args: Any) -> None:
            self.calls.append((name, *args))

        return _record

    def start_camera_stream(self) -> None:
        self.camera_streaming = True
        self.calls.append(("start_camera_stream",))

    def stop_camera_stream(self) -> None:
        self.camera_streaming = False
        self.calls.append(("stop_camera_stream",))

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def recorder_link() -> RecorderLink:
    return RecorderLink()

