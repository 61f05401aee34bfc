from __future__ import annotations

import socket
from typing import Callable

from stockwatch.config.settings import Settings, get_settings


def is_network_available(
    settings: Settings | None = None,
    *,
    connect: Callable[..., socket.socket] = socket.create_connection,
) -> bool:
    """Return whether a TCP connection to the probe host can be opened."""
    cfg = settings or get_settings()
    try:
        conn = connect((cfg.PROBE_HOST, cfg.PROBE_PORT), timeout=cfg.PROBE_TIMEOUT_SEC)
    except OSError:
        return False
    conn.close()
    return True
