from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from nicegui import ui

from paddy_remote.state import PaddyState

if TYPE_CHECKING:
    from paddy_remote.services.link_client import PaddyLinkClient


def parse_minutes(raw: str | None) -> int | None:
    """Parse the horn timer input; None unless it is a positive whole number."""
    try:
        minutes = int((raw or "").strip())
    except ValueError:
        return None
    return minutes if minutes > 0 else None


class CameraPage:
    """Camera tab: live frames, camera pan, horn and horn timer."""

    def __init__(self, link: PaddyLinkClient, state: PaddyState) -> None:
        self.link = link
        self.state = state
        # Browser clients currently looking at the camera tab
        self._viewers: set[str] = set()
        self.timer_input: ui.input | None = None

    @property
    def viewer_count(self) -> int:
        return len(self._viewers)

    # ---- Stream lifecycle ----

    def enter(self, client_id: str) -> None:
        """A client switched to the camera tab; the first viewer starts the stream."""
        first = not self._viewers
        self._viewers.add(client_id)
        if first:
            logging.info("Camera view opened, starting stream")
            self.link.start_camera_stream()

    def leave(self, client_id: str) -> None:
        """A client left the tab or disconnected; the last viewer stops the stream."""
        if client_id not in self._viewers:
            return
        self._viewers.discard(client_id)
        if not self._viewers:
            logging.info("Camera view closed, stopping stream")
            self.link.stop_camera_stream()

    # ---- Actions ----

    def _set_horn_timer(self) -> None:
        raw = self.timer_input.value if self.timer_input else ""
        minutes = parse_minutes(raw)
        if minutes is None:
            ui.notify("Enter a positive number of minutes", color="warning")
            return
        self.link.send_horn_timer_set(minutes)
        ui.notify(f"Horn timer set: {minutes} min", color="primary")
        logging.info("Horn timer set to %s min", minutes)

    def _clear_horn_timer(self) -> None:
        self.link.send_horn_timer_clear()
        if self.timer_input:
            self.timer_input.value = ""
        ui.notify("Horn timer removed", color="primary")
        logging.info("Horn timer cleared")

    # ---- UI ----

    def build(self) -> None:
        with ui.element("div").classes("camera-view"):
            ui.image().bind_source_from(self.state, "frame_source").bind_visibility_from(
                self.state, "frame_source", backward=bool
            ).classes("w-full h-full").props("fit=contain no-transition no-spinner")
            ui.label("Camera View").bind_visibility_from(
                self.state, "frame_source", backward=lambda s: not s
            ).classes("text-[var(--paddy-muted)]")

        with ui.row().classes("w-full items-center justify-center gap-4 mt-2"):
            ui.button(icon="arrow_back", on_click=self.link.send_camera_left).props(
                "unelevated"
            ).classes("dpad-btn").mark("camera-left")
            ui.button("Horn", icon="campaign", on_click=self.link.send_horn).props(
                "unelevated"
            ).mark("camera-horn")
            ui.button(icon="arrow_forward", on_click=self.link.send_camera_right).props(
                "unelevated"
            ).classes("dpad-btn").mark("camera-right")

        with ui.row().classes("w-full items-end gap-2 mt-2"):
            self.timer_input = (
                ui.input(label="Horn timer (min)", placeholder="e.g. 5")
                .props("inputmode=numeric")
                .classes("w-40")
                .mark("horn-minutes")
            )
            ui.button("Set", on_click=self._set_horn_timer).props("unelevated color=primary").mark(
                "horn-timer-set"
            )
            ui.button("Remove", on_click=self._clear_horn_timer).props(
                "unelevated color=negative"
            ).mark("horn-timer-clear")
