"""
Wire codec for the Paddy Core link.

Outbound commands are flat JSON objects with a ``type`` discriminator, e.g.
``{"type": "move", "cmd": "FORWARD"}``. Inbound frames are decoded as JSON when
possible and otherwise passed through untouched.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Inbound event types the screens care about
CAMERA_FRAME_TYPE = "camera_frame"
CONNECTION_STATUS_TYPE = "connection_status"
BATTERY_TYPE = "battery"

# Strings longer than this are assumed to carry media
BULK_TEXT_THRESHOLD = 1000
_MEDIA_KEYS = ("image", "frame", "data")


class MoveDirection(str, Enum):
    FORWARD = "FORWARD"
    BACKWARD = "BACKWARD"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    STOP = "STOP"


class DoorAction(str, Enum):
    OPEN = "OPEN"
    CLOSE = "CLOSE"


class ScoopDirection(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


class CameraCommand(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    START = "START"
    STOP = "STOP"


@dataclass(frozen=True)
class Command:
    """One outbound instruction: a ``type`` plus type-specific fields."""

    type: str
    fields: tuple[tuple[str, Any], ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type}
        for key, value in self.fields:
            payload[key] = value.value if isinstance(value, Enum) else value
        return payload

    def encode(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    def __str__(self) -> str:
        return self.encode()


def move(direction: MoveDirection | str) -> Command:
    return Command("move", (("cmd", MoveDirection(direction)),))


def horn() -> Command:
    return Command("horn")


def door(action: DoorAction | str) -> Command:
    return Command("door", (("action", DoorAction(action)),))


def scoop(direction: ScoopDirection | str) -> Command:
    return Command("scoop", (("cmd", ScoopDirection(direction)),))


def camera(cmd: CameraCommand | str) -> Command:
    return Command("camera", (("cmd", CameraCommand(cmd)),))


def horn_timer_set(minutes: int) -> Command:
    """
    Build a horn timer command.

    Raises:
        ValueError: if ``minutes`` is not a positive integer
    """
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise ValueError(f"Horn timer minutes must be an integer, got {minutes!r}")
    if minutes <= 0:
        raise ValueError(f"Horn timer minutes must be positive, got {minutes}")
    return Command("horn_timer_set", (("minutes", minutes),))


def horn_timer_clear() -> Command:
    return Command("horn_timer_clear")


def controller_connected() -> Command:
    """Announcement sent once every time a session opens."""
    return Command("controller_connected")


def connection_status(connected: bool) -> dict[str, Any]:
    """Synthetic event the link emits to its observers on open/close."""
    return {"type": CONNECTION_STATUS_TYPE, "connected": connected}


def decode_payload(raw: str | bytes) -> Any:
    """
    Decode an inbound frame as JSON, falling back to the raw payload.

    Binary frames are tried as UTF-8 JSON as well; anything undecodable is
    returned unchanged so it can still be delivered.
    """
    text: str
    if isinstance(raw, (bytes, bytearray, memoryview)):
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError:
            return raw
    elif isinstance(raw, str):
        text = raw
    else:
        return raw
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return raw


def is_bulk_media(payload: Any) -> bool:
    """
    Best-effort guess whether ``payload`` carries image/frame data.

    This is a heuristic for keeping frame traffic out of verbose logs. It is
    not a classifier: it has false positives (any long string, any mapping
    with a ``data`` key) and must never decide routing or delivery.
    """
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return True
    if isinstance(payload, str):
        return (
            payload.startswith("data:image/")
            or "image" in payload
            or len(payload) > BULK_TEXT_THRESHOLD
        )
    if isinstance(payload, Mapping):
        return payload.get("type") == "image" or any(k in payload for k in _MEDIA_KEYS)
    return False


def describe(payload: Any) -> str:
    """Short description used when logging bulk payloads."""
    if isinstance(payload, Mapping):
        return f"type={payload.get('type')!r} keys={len(payload)}"
    if isinstance(payload, (str, bytes, bytearray)):
        return f"{type(payload).__name__}[{len(payload)}]"
    if isinstance(payload, memoryview):
        return f"memoryview[{payload.nbytes}]"
    return type(payload).__name__
