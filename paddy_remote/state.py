from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from nicegui import binding

from paddy_remote.services.commands import (
    BATTERY_TYPE,
    CAMERA_FRAME_TYPE,
    CONNECTION_STATUS_TYPE,
)


@binding.bindable_dataclass
class PaddyState:
    connected: bool = False
    link_state: str = "idle"  # LinkState value, refreshed by the footer timer
    battery_level: float | None = None  # percent as reported by the vehicle
    frame_source: str = ""  # data URL of the latest camera frame
    frame_count: int = 0
    last_event_ts: float = 0.0


def apply_event(state: PaddyState, event: Any) -> None:
    """Fold one inbound link event into the shared UI state."""
    state.last_event_ts = time.time()
    if not isinstance(event, Mapping):
        return
    kind = event.get("type")
    if kind == CONNECTION_STATUS_TYPE:
        state.connected = event.get("connected") is True
    elif kind == BATTERY_TYPE:
        level = event.get("level")
        if isinstance(level, (int, float)) and not isinstance(level, bool):
            state.battery_level = float(level)
    elif kind == CAMERA_FRAME_TYPE:
        data = event.get("data")
        if isinstance(data, str) and data:
            state.frame_source = (
                data if data.startswith("data:image/") else f"data:image/jpeg;base64,{data}"
            )
            state.frame_count += 1


# Module-level singleton shared by the pages
paddy_state = PaddyState()
