"""Configuration helpers for backend runtime."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


DEFAULT_NAMESPACE = "RandomEncounter"
DEV_GM_TOKEN = "dev-gm-token"


@dataclass(frozen=True)
class BackendSettings:
    server_salt: str
    database_url: str | None
    host: str
    port: int
    gm_token: str
    namespace: str = DEFAULT_NAMESPACE
    public_rolls: bool = False
    log_level: str = "INFO"


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> BackendSettings:
    port_raw = os.getenv("RANDOMENCOUNTER_PORT", "8000")
    return BackendSettings(
        server_salt=os.getenv("RANDOMENCOUNTER_SERVER_SALT", "dev-salt"),
        database_url=os.getenv("RANDOMENCOUNTER_DATABASE_URL"),
        host=os.getenv("RANDOMENCOUNTER_HOST", "127.0.0.1"),
        port=int(port_raw),
        gm_token=os.getenv("RANDOMENCOUNTER_GM_TOKEN", DEV_GM_TOKEN),
        namespace=os.getenv("RANDOMENCOUNTER_NAMESPACE", DEFAULT_NAMESPACE),
        public_rolls=_env_flag("RANDOMENCOUNTER_PUBLIC_ROLLS"),
        log_level=os.getenv("RANDOMENCOUNTER_LOG_LEVEL", "INFO").upper(),
    )


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for the server process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
