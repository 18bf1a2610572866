from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from nicegui import ui

from paddy_remote.common.logging_config import attach_ui_log, detach_ui_log
from paddy_remote.common.theme import ThemeMode, get_theme, set_theme

if TYPE_CHECKING:
    from paddy_remote.services.link_client import PaddyLinkClient


class SettingsPage:
    """Settings tab page."""

    def __init__(self, link: PaddyLinkClient) -> None:
        self.link = link
        self.link_log: ui.log | None = None

    def build(self) -> None:
        with ui.card().classes("w-full"):
            ui.label("Settings").classes("text-md font-medium")
            with ui.row().classes("items-center gap-2"):
                saved_mode = get_theme()
                start_value = (
                    "System"
                    if saved_mode == "system"
                    else ("Light" if saved_mode == "light" else "Dark")
                )
                mode_toggle = ui.toggle(
                    options=["System", "Light", "Dark"], value=start_value
                ).props("dense")

                def _on_mode() -> None:
                    val = (mode_toggle.value or "System").lower()
                    mode: ThemeMode = (
                        "system"
                        if val.startswith("s")
                        else ("light" if val.startswith("l") else "dark")
                    )
                    set_theme(mode)
                    logging.debug("Set theme to mode: %s", mode)

                mode_toggle.on_value_change(lambda e: _on_mode())

            with ui.row().classes("items-center gap-2"):
                ui.label("Device endpoint").classes("text-sm text-[var(--paddy-muted)]")
                ui.label(self.link.url).classes("text-sm font-mono").mark("endpoint")

        with ui.card().classes("w-full"):
            ui.label("Link log").classes("text-md font-medium")
            self.link_log = ui.log(max_lines=200).classes("w-full h-48")
            attach_ui_log(self.link_log)
            log_widget = self.link_log
            ui.context.client.on_disconnect(lambda: detach_ui_log(log_widget))
