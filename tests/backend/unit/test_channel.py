import asyncio
import json

import httpx
import pytest

from triviaduel.backend.channel import (
    AgentChannelError,
    HttpAgentChannel,
    build_answer_instruction,
    create_channel,
    parse_agent_response,
)
from triviaduel.backend.config import load_settings
from triviaduel.backend.models import Player


def test_parse_agent_response_accepts_success_envelope(snapshot_payload) -> None:
    result = parse_agent_response(
        {"success": True, "response": {"status": "success", "result": snapshot_payload(turn="Player 2")}}
    )

    assert result.success is True
    assert result.snapshot is not None
    assert result.snapshot.turn is Player.P2


def test_parse_agent_response_decodes_string_result(snapshot_payload) -> None:
    result = parse_agent_response(
        {"success": True, "response": {"status": "success", "result": json.dumps(snapshot_payload())}}
    )

    assert result.success is True
    assert result.snapshot is not None


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        {"success": False, "response": {"status": "success", "result": {}}},
        {"success": True, "response": {"status": "error", "result": {}}},
        {"success": True},
        {"success": True, "response": {"status": "success", "result": "not json"}},
        {"success": True, "response": {"status": "success", "result": {"game_status": "in_progress"}}},
    ],
)
def test_parse_agent_response_treats_other_shapes_as_failure(payload) -> None:
    result = parse_agent_response(payload)

    assert result.success is False
    assert result.snapshot is None


def test_answer_instruction_encodes_player_and_text() -> None:
    assert build_answer_instruction(Player.P2.value, "Jupiter") == "Player 2: Jupiter"


def test_http_channel_posts_instruction_and_session(snapshot_payload) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"success": True, "response": {"status": "success", "result": snapshot_payload()}},
        )

    channel = HttpAgentChannel(
        agent_url="http://agent.test/run",
        agent_id="agent-1",
        api_key="secret",
        transport=httpx.MockTransport(handler),
    )

    async def run():
        try:
            return await channel.call("Start new game", "game-1")
        finally:
            await channel.aclose()

    result = asyncio.run(run())

    assert result.success is True
    assert len(seen) == 1
    assert json.loads(seen[0].content) == {
        "instruction": "Start new game",
        "agent_id": "agent-1",
        "context": {"session_id": "game-1"},
    }
    assert seen[0].headers["x-api-key"] == "secret"


def test_http_channel_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    channel = HttpAgentChannel(
        agent_url="http://agent.test/run",
        agent_id="agent-1",
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(AgentChannelError):
        asyncio.run(channel.call("Start new game", "game-1"))


def test_http_channel_wraps_error_status_and_bad_json() -> None:
    responses = [httpx.Response(503, text="down"), httpx.Response(200, text="<html>")]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    channel = HttpAgentChannel(
        agent_url="http://agent.test/run",
        agent_id="agent-1",
        transport=httpx.MockTransport(handler),
    )

    async def run() -> list[str]:
        errors: list[str] = []
        for _ in range(2):
            try:
                await channel.call("Start new game", "game-1")
            except AgentChannelError as exc:
                errors.append(str(exc))
        await channel.aclose()
        return errors

    errors = asyncio.run(run())

    assert len(errors) == 2
    assert "non-JSON" in errors[1]


def test_create_channel_uses_settings(monkeypatch) -> None:
    monkeypatch.setenv("TRIVIADUEL_AGENT_URL", "http://agent.local/run")
    monkeypatch.setenv("TRIVIADUEL_AGENT_ID", "agent-42")

    channel = create_channel(load_settings())

    assert isinstance(channel, HttpAgentChannel)
    assert channel.agent_url == "http://agent.local/run"
    assert channel.agent_id == "agent-42"
