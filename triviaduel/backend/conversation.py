"""Per-player conversation logs and snapshot-to-event routing."""

from __future__ import annotations

from dataclasses import dataclass

from .models import (
    ConversationEvent,
    GameSnapshot,
    GameStatus,
    Player,
    QuestionEvent,
    ResultEvent,
    SubmittedAnswerEvent,
)


class ConversationLog:
    """Append-only event history shown to a single player.

    Optimistic answers are appended before the agent replies and stay marked
    as pending until :meth:`settle` is called for them. Nothing is ever
    removed or rewritten; :meth:`clear` only happens when a new session starts.
    """

    def __init__(self, player: Player) -> None:
        self.player = player
        self._events: list[ConversationEvent] = []
        self._pending: set[int] = set()

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> tuple[ConversationEvent, ...]:
        return tuple(self._events)

    def append(self, event: ConversationEvent) -> int:
        self._events.append(event)
        return len(self._events) - 1

    def append_pending(self, event: SubmittedAnswerEvent) -> int:
        index = self.append(event)
        self._pending.add(index)
        return index

    def settle(self, index: int) -> None:
        self._pending.discard(index)

    def is_pending(self, index: int) -> bool:
        return index in self._pending

    def clear(self) -> None:
        self._events.clear()
        self._pending.clear()


@dataclass(frozen=True)
class RoutedEvent:
    player: Player
    event: ConversationEvent


def route_snapshot(snapshot: GameSnapshot, opening: bool = False) -> list[RoutedEvent]:
    """Derive the log appends for a freshly applied snapshot.

    Events are keyed by the subject the snapshot names: results go to the
    player of ``last_outcome`` and questions go to the player on turn. The
    player who triggered the call plays no part in routing.
    """
    if opening:
        if snapshot.question is None:
            return []
        return [RoutedEvent(player=snapshot.turn, event=QuestionEvent(text=snapshot.question.text))]

    routed: list[RoutedEvent] = []
    outcome = snapshot.last_outcome
    if outcome is not None:
        routed.append(
            RoutedEvent(
                player=outcome.player,
                event=ResultEvent(text=snapshot.message, is_correct=outcome.is_correct),
            )
        )
    if snapshot.status is GameStatus.ACTIVE and snapshot.question is not None:
        routed.append(RoutedEvent(player=snapshot.turn, event=QuestionEvent(text=snapshot.question.text)))
    return routed
