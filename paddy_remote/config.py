from __future__ import annotations

import os
from dataclasses import dataclass

from paddy_remote.constants import (
    MAX_MESSAGE_BYTES,
    OPEN_TIMEOUT_S,
    PADDY_CORE_WS_URL,
    RECONNECT_DELAY_S,
)


@dataclass
class LinkConfig:
    """Runtime configuration for the device link."""
    url: str = PADDY_CORE_WS_URL
    reconnect_delay_s: float = RECONNECT_DELAY_S
    open_timeout_s: float = OPEN_TIMEOUT_S
    max_message_bytes: int = MAX_MESSAGE_BYTES

    @classmethod
    def from_env(cls, url: str | None = None) -> "LinkConfig":
        """Resolve from the environment; an explicit ``url`` (e.g. from the CLI) wins."""
        return cls(
            url=url or os.getenv("PADDY_CORE_WS_URL", PADDY_CORE_WS_URL),
            reconnect_delay_s=float(
                os.getenv("PADDY_RECONNECT_DELAY_S", str(RECONNECT_DELAY_S))
            ),
            open_timeout_s=float(os.getenv("PADDY_OPEN_TIMEOUT_S", str(OPEN_TIMEOUT_S))),
            max_message_bytes=int(
                os.getenv("PADDY_MAX_MESSAGE_BYTES", str(MAX_MESSAGE_BYTES))
            ),
        )
