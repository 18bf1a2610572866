from __future__ import annotations

import logging
import os
import sys
import weakref

# Below DEBUG: per-frame link traffic (camera frames, bulk payloads)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

TRACE_ENABLED = os.getenv("PADDY_TRACE", "0").strip().lower() in ("1", "true", "yes", "on")

_LEVEL_COLORS = {
    "TRACE": "\033[32m",
    "DEBUG": "\033[36m",
    "INFO": "\033[37m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[41m",
}
_RESET = "\033[0m"


class AnsiColorFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL logger: message`` with the level coloured on a TTY."""

    def __init__(self, colored: bool = True) -> None:
        super().__init__(fmt="%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S")
        self.colored = colored and sys.stderr.isatty()

    def formatMessage(self, record: logging.LogRecord) -> str:
        if not self.colored or record.levelname not in _LEVEL_COLORS:
            return super().formatMessage(record)
        plain = record.levelname
        record.levelname = f"{_LEVEL_COLORS[plain]}{plain}{_RESET}"
        try:
            return super().formatMessage(record)
        finally:
            record.levelname = plain


# ---- Link log widgets ----

_ui_logs: weakref.WeakSet = weakref.WeakSet()


def attach_ui_log(log_widget) -> None:
    """Mirror this app's log records into ``log_widget`` (a ``ui.log``)."""
    _ui_logs.add(log_widget)


def detach_ui_log(log_widget) -> None:
    _ui_logs.discard(log_widget)


class NiceGuiLogHandler(logging.Handler):
    """Pushes ``paddy_remote`` records to every attached ``ui.log``."""

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(level=level)
        self.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", "%H:%M:%S"))
        self.addFilter(logging.Filter("paddy_remote"))

    def emit(self, record: logging.LogRecord) -> None:
        if not _ui_logs:
            return
        line = self.format(record)
        for widget in list(_ui_logs):
            try:
                widget.push(line)
            except RuntimeError:
                # client already deleted
                _ui_logs.discard(widget)


def configure_logging(
    level: int = logging.INFO, use_color: bool = True, add_ui_handler: bool = True
) -> logging.Logger:
    """
    Set up the root logger once: coloured stderr console, plus the link log
    handler (INFO and above). PADDY_TRACE lowers the level to TRACE.
    """
    if TRACE_ENABLED:
        level = min(level, TRACE)
    root = logging.getLogger()
    root.setLevel(level)

    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        console = logging.StreamHandler(stream=sys.stderr)
        console.setLevel(level)
        console.setFormatter(AnsiColorFormatter(colored=use_color))
        root.addHandler(console)

    if add_ui_handler and not any(isinstance(h, NiceGuiLogHandler) for h in root.handlers):
        root.addHandler(NiceGuiLogHandler(level=max(level, logging.INFO)))

    # websockets logs every frame at DEBUG
    logging.getLogger("websockets").setLevel(level if level <= TRACE else max(level, logging.INFO))
    return root
