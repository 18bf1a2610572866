from __future__ import annotations

import logging
import os
from pathlib import Path

# Repository root
REPO_ROOT = Path(__file__).resolve().parent.parent

# Onboard controller endpoint (what the link client connects to)
PADDY_CORE_WS_URL: str = os.getenv("PADDY_CORE_WS_URL", "ws://192.168.4.1:81")

# Fixed delay between a lost/failed session and the next connection attempt
RECONNECT_DELAY_S: float = float(os.getenv("PADDY_RECONNECT_DELAY_S", "1.5"))
# Opening handshake timeout for a single attempt
OPEN_TIMEOUT_S: float = float(os.getenv("PADDY_OPEN_TIMEOUT_S", "5.0"))
# Camera frames arrive as base64 JPEG; allow well beyond the 1 MiB websockets default
MAX_MESSAGE_BYTES: int = int(os.getenv("PADDY_MAX_MESSAGE_BYTES", str(8 * 1024 * 1024)))

# Webserver bind (NiceGUI host/port)
SERVER_HOST: str = os.getenv("PADDY_SERVER_IP", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("PADDY_SERVER_PORT", "8080"))


def _resolve_log_level() -> int:
    s = os.getenv("PADDY_LOG_LEVEL")
    if s:
        name = s.strip().upper()
        mapping = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return mapping.get(name, logging.WARNING)
    else:
        return logging.WARNING


LOG_LEVEL: int = _resolve_log_level()
