"""
Runtime configuration and logging setup.

Settings come from environment variables; app.py overrides them from
the command line.

    DASHBOARD_STORAGE            JSON file for the session cache ("" = in-memory)
    DASHBOARD_LATENCY_SCALE      multiplier on every simulated delay (default 1.0)
    DASHBOARD_CHAT_FAILURE_RATE  probability a chat message fails (default 0.1)
    DASHBOARD_PREFERS_DARK       "1"/"true" to default to the dark theme
    LOG_LEVEL                    logging level name (default INFO)
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AppConfig:
    storage_path: Optional[str] = None
    latency_scale: float = 1.0
    chat_failure_rate: float = 0.1
    prefers_dark: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "AppConfig":
        env = os.environ if environ is None else environ
        return cls(
            storage_path=env.get("DASHBOARD_STORAGE") or None,
            latency_scale=float(env.get("DASHBOARD_LATENCY_SCALE", "1.0")),
            chat_failure_rate=float(env.get("DASHBOARD_CHAT_FAILURE_RATE", "0.1")),
            prefers_dark=env.get("DASHBOARD_PREFERS_DARK", "").strip().lower() in _TRUTHY,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level="INFO") -> logging.Logger:
    """Attach one console handler to the root logger (idempotent)."""
    root = logging.getLogger()
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
        root.addHandler(handler)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return root
