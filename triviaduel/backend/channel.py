"""Transport interfaces and implementations for the trivia agent."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from triviaduel.backend.config import BackendSettings
from triviaduel.backend.models import AgentResult, GameSnapshot

logger = logging.getLogger(__name__)

START_INSTRUCTION = "Start new game"


class AgentChannelError(Exception):
    """Raised when the agent could not be reached or replied with garbage."""


class AgentChannel(Protocol):
    async def call(self, instruction: str, session_id: str) -> AgentResult:
        """Send one instruction for a session and return the normalized result."""

    async def aclose(self) -> None:
        """Release transport resources."""


def parse_agent_response(payload: Any) -> AgentResult:
    """Normalize a raw agent reply into an :class:`AgentResult`.

    Anything other than ``success`` plus a ``"success"`` status with a valid
    snapshot is reported as unsuccessful.
    """
    if not isinstance(payload, dict):
        return AgentResult(success=False, status="malformed")

    response = payload.get("response")
    status = response.get("status") if isinstance(response, dict) else None
    if payload.get("success") is not True or status != "success":
        return AgentResult(success=False, status=str(status or "error"))

    result = response.get("result")
    if isinstance(result, str):
        try:
            result = json.loads(result)
        except json.JSONDecodeError:
            return AgentResult(success=False, status="invalid_result")

    try:
        snapshot = GameSnapshot.model_validate(result)
    except ValidationError as exc:
        logger.warning(f"Agent returned an invalid snapshot: {exc.error_count()} error(s)")
        return AgentResult(success=False, status="invalid_result")
    return AgentResult(success=True, status="success", snapshot=snapshot)


def build_answer_instruction(player: str, text: str) -> str:
    return f"{player}: {text}"


@dataclass
class HttpAgentChannel:
    agent_url: str
    agent_id: str
    api_key: str | None = None
    timeout_s: float = 30.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"x-api-key": self.api_key} if self.api_key else {}
            self._client = httpx.AsyncClient(timeout=self.timeout_s, headers=headers, transport=self.transport)
        return self._client

    async def call(self, instruction: str, session_id: str) -> AgentResult:
        body = {
            "instruction": instruction,
            "agent_id": self.agent_id,
            "context": {"session_id": session_id},
        }
        try:
            response = await self._get_client().post(self.agent_url, json=body)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise AgentChannelError(f"Agent request failed: {exc}") from exc
        except ValueError as exc:
            raise AgentChannelError("Agent replied with a non-JSON body") from exc
        return parse_agent_response(payload)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def create_channel(settings: BackendSettings) -> AgentChannel:
    return HttpAgentChannel(
        agent_url=settings.agent_url,
        agent_id=settings.agent_id,
        api_key=settings.api_key,
        timeout_s=settings.timeout_s,
    )
