"""Session identity helpers."""

from __future__ import annotations

import secrets
import time


SESSION_SUFFIX_BYTES = 4


def generate_session_id() -> str:
    """Mint an opaque correlation token for one game session."""
    millis = int(time.time() * 1000)
    return f"game-{millis}-{secrets.token_hex(SESSION_SUFFIX_BYTES)}"
