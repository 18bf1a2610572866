import argparse
import logging
import os
import sys
from typing import Any

from nicegui import Client, ui
from nicegui import app as ng_app

from paddy_remote.common.logging_config import TRACE, configure_logging
from paddy_remote.common.theme import apply_theme, get_theme, inject_layout_css
from paddy_remote.config import LinkConfig
from paddy_remote.constants import LOG_LEVEL, SERVER_HOST, SERVER_PORT
from paddy_remote.pages.camera import CameraPage
from paddy_remote.pages.controller import ControllerPage
from paddy_remote.pages.settings import SettingsPage
from paddy_remote.services.link_client import PaddyLinkClient
from paddy_remote.state import PaddyState, apply_event, paddy_state

CONTROLLER_TAB = "controller"
CAMERA_TAB = "camera"
SETTINGS_TAB = "settings"


def register_pages(link: PaddyLinkClient, state: PaddyState = paddy_state) -> dict[str, Any]:
    """Register the index page; every page object receives the same link instance."""
    controller_page = ControllerPage(link, state)
    camera_page = CameraPage(link, state)
    settings_page = SettingsPage(link)

    def build_footer() -> None:
        with ui.footer().classes("justify-between items-center px-3 py-1"):
            ui.label().bind_text_from(
                state, "link_state", backward=lambda s: f"LINK: {str(s).upper()}"
            ).classes("text-sm").mark("link-state")
            ui.button("Reconnect", on_click=link.connect).props("flat dense").mark("reconnect")

    def _refresh_link_state() -> None:
        state.link_state = link.state.value
        state.connected = link.is_open()

    @ui.page("/")
    def index(client: Client) -> None:
        apply_theme(get_theme())
        inject_layout_css()

        with ui.header().classes("p-0"):
            with ui.tabs().classes("w-full") as tabs:
                ui.tab(CONTROLLER_TAB, label="Controller", icon="tune")
                ui.tab(CAMERA_TAB, label="Camera", icon="photo_camera")
                ui.tab(SETTINGS_TAB, label="Settings", icon="settings")

        def _on_tab_change(e) -> None:
            if e.value == CAMERA_TAB:
                camera_page.enter(client.id)
            else:
                camera_page.leave(client.id)

        with ui.tab_panels(tabs, value=CONTROLLER_TAB, on_change=_on_tab_change).classes("w-full"):
            with ui.tab_panel(CONTROLLER_TAB):
                controller_page.build()
            with ui.tab_panel(CAMERA_TAB):
                camera_page.build()
            with ui.tab_panel(SETTINGS_TAB):
                settings_page.build()

        build_footer()
        _refresh_link_state()
        ui.timer(0.5, _refresh_link_state)
        client.on_disconnect(lambda: camera_page.leave(client.id))

    return {"controller": controller_page, "camera": camera_page, "settings": settings_page}


def register_lifecycle(link: PaddyLinkClient, state: PaddyState = paddy_state) -> None:
    """Tie the link session to the NiceGUI app lifetime."""

    def _on_link_event(event: Any) -> None:
        apply_event(state, event)

    def _startup() -> None:
        link.add_listener(_on_link_event)
        link.connect()

    async def _shutdown() -> None:
        if link.camera_streaming:
            link.stop_camera_stream()
            await link.drain()
        link.remove_listener(_on_link_event)
        link.close()
        await link.wait_closed()
        logging.info("Link closed")

    ng_app.on_startup(_startup)
    ng_app.on_shutdown(_shutdown)


def main() -> None:
    # CLI: web bind, device endpoint, and log level
    parser = argparse.ArgumentParser(description="Paddy Core NiceGUI remote")
    parser.add_argument("--host", default=SERVER_HOST, help="Webserver bind host")
    parser.add_argument("--port", type=int, default=SERVER_PORT, help="Webserver bind port")
    parser.add_argument(
        "--url", default=None, help="Device WebSocket endpoint (overrides PADDY_CORE_WS_URL)"
    )
    parser.add_argument(
        "--log-level",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set log level",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity; -v=INFO, -vv=DEBUG, -vvv=TRACE",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Enable WARNING logging")
    args, _ = parser.parse_known_args()

    # Resolve log level priority: explicit --log-level > -v/-q > env default from constants
    if args.log_level:
        log_level = TRACE if args.log_level == "TRACE" else getattr(logging, args.log_level)
    elif args.verbose >= 3:
        os.environ["PADDY_TRACE"] = "1"
        log_level = TRACE
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    elif args.verbose == 1:
        log_level = logging.INFO
    elif args.quiet:
        log_level = logging.WARNING
    else:
        log_level = LOG_LEVEL

    configure_logging(log_level)

    link = PaddyLinkClient(LinkConfig.from_env(url=args.url))
    register_pages(link)
    register_lifecycle(link)
    logging.info("Webserver bind: host=%s port=%s", args.host, args.port)
    logging.info("Device endpoint: %s", link.url)

    ui.run(
        title="Paddy Core Remote",
        host=args.host,
        port=int(args.port),
        reload=False,
        show=False,
        loop="uvloop" if sys.platform != "win32" else "asyncio",
        http="httptools",
        ws="wsproto",
        binding_refresh_interval=0.05,
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
