"""Shared fixtures: scripted agent channel and snapshot payload builders."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest

from triviaduel.backend.models import AgentResult, GameSnapshot


def build_snapshot_payload(
    status: str = "in_progress",
    current_round: int = 1,
    turn: str = "Player 1",
    question: tuple[str, str] | None = ("Capital of France?", "Geography"),
    last_result: dict[str, Any] | None = None,
    scores: tuple[int, int] = (0, 0),
    winner: str | None = None,
    message: str = "",
) -> dict[str, Any]:
    leaderboard = sorted(
        [{"player": "Player 1", "score": scores[0]}, {"player": "Player 2", "score": scores[1]}],
        key=lambda entry: entry["score"],
        reverse=True,
    )
    return {
        "game_status": status,
        "current_round": current_round,
        "current_turn": turn,
        "question": {"text": question[0], "category": question[1]} if question else None,
        "last_answer_result": last_result,
        "scores": {"player1": scores[0], "player2": scores[1]},
        "leaderboard": leaderboard,
        "winner": winner,
        "game_message": message,
    }


def outcome_payload(player: str, answer: str, correct: bool, points: int = 10) -> dict[str, Any]:
    return {
        "player": player,
        "answer_given": answer,
        "correct_answer": answer if correct else "something else",
        "is_correct": correct,
        "points_awarded": points if correct else 0,
    }


def success(payload: dict[str, Any]) -> AgentResult:
    return AgentResult(success=True, status="success", snapshot=GameSnapshot.model_validate(payload))


class ScriptedChannel:
    """Agent channel replaying canned replies; exceptions in the script are raised."""

    def __init__(self, replies: list[Any] | None = None) -> None:
        self.replies = list(replies or [])
        self.calls: list[tuple[str, str]] = []
        self.gate: asyncio.Event | None = None
        self.on_call: Callable[[], None] | None = None
        self.closed = False

    async def call(self, instruction: str, session_id: str) -> AgentResult:
        self.calls.append((instruction, session_id))
        if self.on_call is not None:
            self.on_call()
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def snapshot_payload() -> Callable[..., dict[str, Any]]:
    return build_snapshot_payload


@pytest.fixture
def outcome() -> Callable[..., dict[str, Any]]:
    return outcome_payload


@pytest.fixture
def reply() -> Callable[[dict[str, Any]], AgentResult]:
    return success


@pytest.fixture
def channel() -> ScriptedChannel:
    return ScriptedChannel()
