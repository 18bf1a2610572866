from __future__ import annotations

import logging
from typing import Literal, cast, get_args

from nicegui import app, ui

ThemeMode = Literal["light", "dark", "system"]


def get_palette(mode: ThemeMode) -> dict[str, str]:
    """Return palette tokens for the given mode."""
    if mode == "dark":
        return {
            "primary": "#1F538D",
            "background": "#0B1120",
            "surface": "#111827",
            "pad_button": "#1F2937",
            "pad_border": "#374151",
            "text": "#EAEAEA",
            "muted": "#9CA3AF",
            "positive": "#22C55E",
            "negative": "#EF4444",
            "warning": "#F2C037",
        }
    # light
    return {
        "primary": "#3B8ED0",
        "background": "#EBEBEB",
        "surface": "#F9FAFB",
        "pad_button": "#D1D5DB",
        "pad_border": "#9CA3AF",
        "text": "#1A1A1A",
        "muted": "#6B7280",
        "positive": "#16A34A",
        "negative": "#DC2626",
        "warning": "#F2C037",
    }


def _css_vars(p: dict[str, str]) -> str:
    return f""":root {{
  --paddy-bg: {p["background"]};
  --paddy-surface: {p["surface"]};
  --paddy-pad: {p["pad_button"]};
  --paddy-pad-border: {p["pad_border"]};
  --paddy-text: {p["text"]};
  --paddy-muted: {p["muted"]};
}}"""


def palette_css(mode: ThemeMode) -> str:
    """CSS variables for ``mode``; "system" follows the browser's prefers-color-scheme."""
    if mode == "system":
        variables = (
            _css_vars(get_palette("light"))
            + "\n@media (prefers-color-scheme: dark) {\n"
            + _css_vars(get_palette("dark"))
            + "\n}"
        )
    else:
        variables = _css_vars(get_palette(mode))
    return (
        variables
        + """
body, .q-page { background: var(--paddy-bg); color: var(--paddy-text); }
.q-header, .q-footer, .q-card { background: var(--paddy-surface); color: var(--paddy-text); }
"""
    )


def inject_layout_css() -> None:
    """D-pad, camera view and status dot styles."""
    ui.add_css(
        """
.dpad-btn { width: 72px; height: 72px; border-radius: 16px; background: var(--paddy-pad) !important; border: 1px solid var(--paddy-pad-border); }
.dpad-btn.dpad-stop { border-color: #7f1d1d; }
.status-dot { width: 10px; height: 10px; border-radius: 5px; display: inline-block; }
.camera-view { width: 100%; aspect-ratio: 4 / 3; background: #000; border-radius: 12px; overflow: hidden; display: flex; align-items: center; justify-content: center; }
"""
    )


def apply_theme(mode: ThemeMode) -> None:
    """Set Quasar colors, dark mode and CSS variables for the selected mode."""
    pal = get_palette("dark" if mode == "dark" else "light")
    ui.colors(
        primary=pal["primary"],
        positive=pal["positive"],
        negative=pal["negative"],
        warning=pal["warning"],
    )
    if mode == "dark":
        ui.dark_mode().enable()
    elif mode == "light":
        ui.dark_mode().disable()
    else:
        # Quasar follows the browser's color scheme
        ui.dark_mode().auto()
    ui.add_css(palette_css(mode))
    logging.debug("Applied theme mode: %s", mode)


def set_theme(mode: ThemeMode) -> ThemeMode:
    """Persist, set and apply theme mode."""
    app.storage.general["theme_mode"] = mode
    apply_theme(mode)
    return mode


def get_theme() -> ThemeMode:
    """Return current requested mode ('light'/'dark'/'system')."""
    mode = app.storage.general.get("theme_mode", "system")
    if isinstance(mode, str) and mode in get_args(ThemeMode):
        return cast("ThemeMode", mode)
    return cast("ThemeMode", "system")
