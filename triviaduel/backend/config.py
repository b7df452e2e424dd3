"""Configuration helpers for backend runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass


DEFAULT_AGENT_ID = "69787493a75ef8a94cc4f20c"


@dataclass(frozen=True)
class BackendSettings:
    agent_url: str
    agent_id: str
    api_key: str | None
    timeout_s: float
    host: str
    port: int
    auto_start: bool
    log_level: str


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> BackendSettings:
    port_raw = os.getenv("TRIVIADUEL_PORT", "8000")
    timeout_raw = os.getenv("TRIVIADUEL_TIMEOUT_S", "30")
    return BackendSettings(
        agent_url=os.getenv("TRIVIADUEL_AGENT_URL", "http://127.0.0.1:8080/agent"),
        agent_id=os.getenv("TRIVIADUEL_AGENT_ID", DEFAULT_AGENT_ID),
        api_key=os.getenv("TRIVIADUEL_API_KEY"),
        timeout_s=float(timeout_raw),
        host=os.getenv("TRIVIADUEL_HOST", "127.0.0.1"),
        port=int(port_raw),
        auto_start=_env_flag("TRIVIADUEL_AUTO_START", "1"),
        log_level=os.getenv("TRIVIADUEL_LOG_LEVEL", "INFO").upper(),
    )
