from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from nicegui import ui

from paddy_remote.state import PaddyState

if TYPE_CHECKING:
    from paddy_remote.services.link_client import PaddyLinkClient


def _battery_text(level: float | None) -> str:
    return "-" if level is None else f"{level:.0f}%"


class ControllerPage:
    """Controller tab: connection/battery status, D-pad and vehicle actions."""

    def __init__(self, link: PaddyLinkClient, state: PaddyState) -> None:
        self.link = link
        self.state = state
        self.status_label: ui.label | None = None
        self.battery_label: ui.label | None = None

    # ---- Actions ----

    def _press(self, action: Callable[[], None], name: str) -> None:
        try:
            action()
            logging.debug("Controller: %s", name)
        except Exception as e:
            logging.error("Controller %s failed: %s", name, e)

    def _pad_button(self, icon: str, action: Callable[[], None], mark: str, stop: bool = False) -> ui.button:
        btn = ui.button(icon=icon, on_click=lambda: self._press(action, mark)).props("flat")
        btn.classes("dpad-btn dpad-stop" if stop else "dpad-btn").mark(mark)
        return btn

    # ---- UI ----

    def build(self) -> None:
        with ui.card().classes("w-full"):
            ui.label("Paddy Core Controller").classes("text-xl font-semibold")
            with ui.row().classes("w-full items-center justify-between"):
                ui.label("Connection").classes("text-sm text-[var(--paddy-muted)]")
                with ui.row().classes("items-center gap-2"):
                    ui.element("span").classes("status-dot bg-positive").bind_visibility_from(
                        self.state, "connected"
                    )
                    ui.element("span").classes("status-dot bg-negative").bind_visibility_from(
                        self.state, "connected", backward=lambda v: not v
                    )
                    self.status_label = ui.label("Disconnected").bind_text_from(
                        self.state,
                        "connected",
                        backward=lambda v: "Connected" if v else "Disconnected",
                    ).classes("text-sm font-semibold")
            with ui.row().classes("w-full items-center justify-between"):
                ui.label("Battery").classes("text-sm text-[var(--paddy-muted)]")
                with ui.row().classes("items-center gap-2"):
                    ui.icon("battery_full").classes("text-positive")
                    self.battery_label = ui.label("-").bind_text_from(
                        self.state, "battery_level", backward=_battery_text
                    ).classes("text-sm font-semibold")

        with ui.card().classes("w-full"):
            ui.label("Movement").classes("text-md font-medium")
            with ui.column().classes("w-full items-center gap-2"):
                self._pad_button("arrow_upward", self.link.send_move_forward, "move-forward")
                with ui.row().classes("gap-4"):
                    self._pad_button("arrow_back", self.link.send_move_left, "move-left")
                    self._pad_button("stop", self.link.send_stop, "move-stop", stop=True)
                    self._pad_button("arrow_forward", self.link.send_move_right, "move-right")
                self._pad_button("arrow_downward", self.link.send_move_backward, "move-backward")

        with ui.card().classes("w-full"):
            ui.label("Actions").classes("text-md font-medium")

            ui.label("Horn").classes("text-sm text-[var(--paddy-muted)]")
            ui.button(
                "Horn", icon="campaign", on_click=lambda: self._press(self.link.send_horn, "horn")
            ).props("unelevated").classes("w-full").mark("horn")

            ui.label("Rice Door").classes("text-sm text-[var(--paddy-muted)]")
            with ui.row().classes("items-center gap-2"):
                ui.button(
                    "Open", on_click=lambda: self._press(self.link.send_door_open, "door-open")
                ).props("unelevated").mark("door-open")
                ui.button(
                    "Close", on_click=lambda: self._press(self.link.send_door_close, "door-close")
                ).props("unelevated color=negative").mark("door-close")

            ui.label("Front Scoop").classes("text-sm text-[var(--paddy-muted)]")
            with ui.row().classes("items-center gap-2"):
                ui.button(
                    "Up", on_click=lambda: self._press(self.link.send_scoop_up, "scoop-up")
                ).props("unelevated").mark("scoop-up")
                ui.button(
                    "Down", on_click=lambda: self._press(self.link.send_scoop_down, "scoop-down")
                ).props("unelevated").mark("scoop-down")
