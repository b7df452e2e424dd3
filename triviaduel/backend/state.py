"""Read-only view projections of a session for presentation layers."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from triviaduel.backend.conversation import ConversationLog
from triviaduel.backend.coordinator import SessionCoordinator
from triviaduel.backend.models import GameSnapshot, GameStatus, Player


def _log_entries(log: ConversationLog) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    for index, event in enumerate(log.events):
        entry = asdict(event)
        if "is_correct" in entry:
            entry["isCorrect"] = entry.pop("is_correct")
        if event.kind == "answer":
            entry["pending"] = log.is_pending(index)
        entries.append(entry)
    return entries


def _leaderboard_rows(snapshot: GameSnapshot) -> list[dict[str, Any]]:
    entries = snapshot.leaderboard
    rows: list[dict[str, Any]] = []
    for rank, entry in enumerate(entries, start=1):
        leading = rank == 1 and len(entries) > 1 and entry.score > entries[1].score
        rows.append(
            {
                "rank": rank,
                "player": entry.player.value,
                "score": entry.score,
                "active": entry.player is snapshot.turn,
                "leading": leading,
            }
        )
    return rows


def build_session_view(coordinator: SessionCoordinator) -> dict[str, Any]:
    """Return the JSON-ready state every player view renders from."""
    snapshot = coordinator.snapshot
    active = snapshot is not None and snapshot.status is GameStatus.ACTIVE
    turn = snapshot.turn if snapshot is not None else Player.P1

    players: dict[str, Any] = {}
    for player in Player:
        players[player.value] = {
            "score": snapshot.scores.score_for(player) if snapshot is not None else 0,
            "active": active and turn is player,
            "canSubmit": coordinator.can_submit(player),
            "draft": coordinator.draft(player),
            "log": _log_entries(coordinator.log(player)),
        }

    question = None
    if active and snapshot.question is not None:
        question = {"text": snapshot.question.text, "category": snapshot.question.category}

    winner = None
    if coordinator.winner_revealed and snapshot is not None and snapshot.winner is not None:
        winner = {
            "player": snapshot.winner.value,
            "finalScores": {player.value: snapshot.scores.score_for(player) for player in Player},
        }

    return {
        "sessionId": coordinator.session_id,
        "busy": coordinator.busy,
        "status": snapshot.status.value if snapshot is not None else None,
        "round": snapshot.round if snapshot is not None else None,
        "turn": turn.value,
        "question": question,
        "message": snapshot.message if snapshot is not None else "",
        "leaderboard": _leaderboard_rows(snapshot) if snapshot is not None else [],
        "players": players,
        "winner": winner,
    }
