from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import websockets

from paddy_remote.common.logging_config import TRACE
from paddy_remote.config import LinkConfig
from paddy_remote.services import commands
from paddy_remote.services.commands import (
    CameraCommand,
    Command,
    DoorAction,
    MoveDirection,
    ScoopDirection,
)

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]
Connector = Callable[[str], Awaitable[Any]]


class LinkState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class PaddyLinkClient:
    """
    Owns the single WebSocket session to the Paddy Core controller.

    - Reconnects after a fixed delay whenever a session fails or drops, until close().
    - Replays the camera streaming intent on every successful open.
    - Fans every inbound frame out to all listeners, in registration order.

    All methods must be called from the event loop thread; none of them block.
    """

    def __init__(self, config: LinkConfig | None = None, connector: Connector | None = None) -> None:
        self.config = config or LinkConfig()
        self._connector: Connector = connector or self._open_websocket
        self._state = LinkState.IDLE
        self._ws: Any = None
        self._outbox: asyncio.Queue[str] | None = None
        self._session_task: asyncio.Task | None = None
        self._closing_tasks: set[asyncio.Task] = set()
        self._reconnect_timer: asyncio.TimerHandle | None = None
        # Bumped by connect() and close(); stale tasks/timers compare against it
        self._epoch = 0
        self._listeners: list[Listener] = []
        self._camera_streaming = False  # desired state

    @property
    def url(self) -> str:
        return self.config.url

    @property
    def state(self) -> LinkState:
        return self._state

    @property
    def camera_streaming(self) -> bool:
        return self._camera_streaming

    def is_open(self) -> bool:
        return self._state is LinkState.OPEN

    # ---- Connection management ----

    async def _open_websocket(self, url: str) -> Any:
        return await websockets.connect(
            url,
            open_timeout=self.config.open_timeout_s,
            max_size=self.config.max_message_bytes,
        )

    def connect(self) -> None:
        """Start a session unless one is already connecting or open."""
        if self._state in (LinkState.CONNECTING, LinkState.OPEN):
            logger.debug("Already connected or connecting to %s", self.url)
            return
        self._cancel_reconnect()
        self._epoch += 1
        self._state = LinkState.CONNECTING
        logger.info("Connecting to %s", self.url)
        self._session_task = asyncio.get_running_loop().create_task(
            self._run_session(self._epoch), name="paddy-link-session"
        )

    def close(self) -> None:
        """Tear down the session (if any) and stop reconnecting. Safe to call repeatedly."""
        self._cancel_reconnect()
        self._epoch += 1
        was_open = self._state is LinkState.OPEN
        task = self._session_task
        self._session_task = None
        self._ws = None
        self._outbox = None
        self._state = LinkState.IDLE
        if task is not None and not task.done():
            logger.info("Closing connection to %s", self.url)
            task.cancel()
            self._closing_tasks.add(task)
            task.add_done_callback(self._closing_tasks.discard)
        if was_open:
            self._emit(commands.connection_status(False))

    async def wait_closed(self) -> None:
        """Wait until every session cancelled by close() has released its socket."""
        if self._closing_tasks:
            await asyncio.wait(set(self._closing_tasks))

    async def drain(self) -> None:
        """Wait until commands queued on the current session are written (or the session ends)."""
        outbox, task = self._outbox, self._session_task
        if outbox is None or task is None:
            return
        join = asyncio.ensure_future(outbox.join())
        try:
            await asyncio.wait({join, task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            join.cancel()

    async def _run_session(self, epoch: int) -> None:
        try:
            ws = await self._connector(self.url)
        except (OSError, asyncio.TimeoutError, websockets.InvalidHandshake, websockets.InvalidURI) as e:
            logger.warning("Connection to %s failed: %s", self.url, str(e) or e.__class__.__name__)
            self._session_ended(epoch)
            return
        except Exception:
            logger.exception("Unexpected error connecting to %s", self.url)
            self._session_ended(epoch)
            return

        if epoch != self._epoch:
            await ws.close()
            return

        outbox: asyncio.Queue[str] = asyncio.Queue()
        self._ws = ws
        self._outbox = outbox
        self._state = LinkState.OPEN
        logger.info("Connected to %s", self.url)
        sender = asyncio.create_task(self._sender(ws, outbox), name="paddy-link-sender")

        self._send_raw(commands.controller_connected())
        self._replay_intents()
        self._emit(commands.connection_status(True))

        try:
            async for message in ws:
                self._dispatch(message)
        except websockets.ConnectionClosed as e:
            logger.warning("Connection to %s lost: %s", self.url, e)
        except Exception:
            logger.exception("Session with %s failed", self.url)
        finally:
            sender.cancel()
            self._session_ended(epoch)
            with contextlib.suppress(websockets.WebSocketException, OSError):
                await ws.close()

    async def _sender(self, ws: Any, outbox: asyncio.Queue[str]) -> None:
        while True:
            data = await outbox.get()
            try:
                await ws.send(data)
            except websockets.ConnectionClosed:
                logger.debug("Send failed, connection closed: %s", data)
                return
            finally:
                outbox.task_done()

    def _session_ended(self, epoch: int) -> None:
        if epoch != self._epoch:
            # close() or a newer connect() already took over
            return
        was_open = self._state is LinkState.OPEN
        self._ws = None
        self._outbox = None
        self._session_task = None
        self._state = LinkState.CLOSED
        logger.info("Disconnected from %s; retrying in %.1fs", self.url, self.config.reconnect_delay_s)
        self._schedule_reconnect()
        if was_open:
            self._emit(commands.connection_status(False))

    def _schedule_reconnect(self) -> None:
        if self._reconnect_timer is not None or self._state is not LinkState.CLOSED:
            return
        loop = asyncio.get_running_loop()
        self._reconnect_timer = loop.call_later(self.config.reconnect_delay_s, self._on_reconnect_timer)

    def _on_reconnect_timer(self) -> None:
        self._reconnect_timer = None
        if self._state is LinkState.CLOSED:
            self.connect()

    def _cancel_reconnect(self) -> None:
        if self._reconnect_timer is not None:
            self._reconnect_timer.cancel()
            self._reconnect_timer = None

    def _ensure_connected(self) -> None:
        if self._state in (LinkState.IDLE, LinkState.CLOSED):
            self.connect()

    # ---- Intents ----

    def _replay_intents(self) -> None:
        if self._camera_streaming:
            logger.info("Camera streaming requested, sending START")
            self._send_raw(commands.camera(CameraCommand.START))

    def start_camera_stream(self) -> None:
        """Request the live camera stream; survives reconnects until stop_camera_stream()."""
        self._camera_streaming = True
        self._ensure_connected()
        # Not open yet: the intent is replayed when the session opens
        if self.is_open():
            self._send_raw(commands.camera(CameraCommand.START))

    def stop_camera_stream(self) -> None:
        self._camera_streaming = False
        self.send(commands.camera(CameraCommand.STOP))

    # ---- Observers ----

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners = [fn for fn in self._listeners if fn is not listener]

    def _dispatch(self, message: str | bytes) -> None:
        event = commands.decode_payload(message)
        if commands.is_bulk_media(event):
            logger.log(TRACE, "Bulk message: %s", commands.describe(event))
        else:
            logger.debug("Message: %s", event)
        self._emit(event)

    def _emit(self, event: Any) -> None:
        # Snapshot: listeners added or removed by a callback apply from the next event on
        for listener in tuple(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Link listener %r failed", listener)

    # ---- Commands ----

    def send(self, command: Command) -> None:
        """Send a one-shot command; dropped unless the session is open."""
        self._ensure_connected()
        self._send_raw(command)

    def _send_raw(self, command: Command) -> None:
        if self._state is not LinkState.OPEN or self._outbox is None:
            logger.debug("Cannot send, link not open: %s", command)
            return
        logger.debug("SEND: %s", command)
        self._outbox.put_nowait(command.encode())

    def send_move_forward(self) -> None:
        self.send(commands.move(MoveDirection.FORWARD))

    def send_move_backward(self) -> None:
        self.send(commands.move(MoveDirection.BACKWARD))

    def send_move_left(self) -> None:
        self.send(commands.move(MoveDirection.LEFT))

    def send_move_right(self) -> None:
        self.send(commands.move(MoveDirection.RIGHT))

    def send_stop(self) -> None:
        self.send(commands.move(MoveDirection.STOP))

    def send_horn(self) -> None:
        self.send(commands.horn())

    def send_door_open(self) -> None:
        self.send(commands.door(DoorAction.OPEN))

    def send_door_close(self) -> None:
        self.send(commands.door(DoorAction.CLOSE))

    def send_scoop_up(self) -> None:
        self.send(commands.scoop(ScoopDirection.UP))

    def send_scoop_down(self) -> None:
        self.send(commands.scoop(ScoopDirection.DOWN))

    def send_camera_left(self) -> None:
        self.send(commands.camera(CameraCommand.LEFT))

    def send_camera_right(self) -> None:
        self.send(commands.camera(CameraCommand.RIGHT))

    def send_horn_timer_set(self, minutes: int) -> None:
        try:
            command = commands.horn_timer_set(minutes)
        except ValueError as e:
            logger.warning("Horn timer not set: %s", e)
            return
        self.send(command)

    def send_horn_timer_clear(self) -> None:
        self.send(commands.horn_timer_clear())
