"""Session and turn coordination for a two-player trivia duel."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from triviaduel.backend.channel import START_INSTRUCTION, AgentChannel, AgentChannelError, build_answer_instruction
from triviaduel.backend.conversation import ConversationLog, route_snapshot
from triviaduel.backend.identity import generate_session_id
from triviaduel.backend.models import (
    AgentResult,
    CallOutcome,
    GameSnapshot,
    GameStatus,
    Player,
    SubmittedAnswerEvent,
)

logger = logging.getLogger(__name__)

WINNER_REVEAL_DELAY_S = 1.0

ChangeListener = Callable[["SessionCoordinator"], Awaitable[None]]


class SessionCoordinator:
    """Owns the snapshot, both conversation logs and the single in-flight call.

    Usage:
        coordinator = SessionCoordinator(channel=create_channel(settings))
        await coordinator.start_session()
        await coordinator.submit_answer(Player.P1, "Paris")

    All state changes for one agent response happen without an intervening
    ``await``, so observers never see a snapshot without its log appends.
    """

    def __init__(self, channel: AgentChannel) -> None:
        self._channel = channel
        self._snapshot: GameSnapshot | None = None
        self._logs: dict[Player, ConversationLog] = {player: ConversationLog(player) for player in Player}
        self._drafts: dict[Player, str] = {player: "" for player in Player}
        self._busy = False
        self._session_id = generate_session_id()
        self._reveal_task: asyncio.Task[None] | None = None
        self._winner_revealed = False
        self._listeners: list[ChangeListener] = []

    @property
    def snapshot(self) -> GameSnapshot | None:
        return self._snapshot

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def winner_revealed(self) -> bool:
        return self._winner_revealed

    @property
    def reveal_pending(self) -> bool:
        return self._reveal_task is not None and not self._reveal_task.done()

    def log(self, player: Player) -> ConversationLog:
        return self._logs[player]

    def draft(self, player: Player) -> str:
        return self._drafts[player]

    def set_draft(self, player: Player, text: str) -> None:
        self._drafts[player] = text

    def can_submit(self, player: Player) -> bool:
        snapshot = self._snapshot
        return (
            not self._busy
            and snapshot is not None
            and snapshot.status is GameStatus.ACTIVE
            and snapshot.turn is player
        )

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    async def start_session(self) -> CallOutcome:
        if self._busy:
            logger.warning("Start rejected: a call is already in flight")
            return CallOutcome.REJECTED

        self._cancel_reveal()
        self._winner_revealed = False
        for player in Player:
            self._logs[player].clear()
            self._drafts[player] = ""
        self._session_id = generate_session_id()
        session_id = self._session_id

        logger.info(f"Starting session {session_id}")
        return await self._exchange(START_INSTRUCTION, session_id, opening=True)

    async def submit_answer(self, player: Player, text: str) -> CallOutcome:
        if not text.strip() or not self.can_submit(player):
            logger.warning(f"Answer from {player.value} rejected")
            return CallOutcome.REJECTED

        session_id = self._session_id
        index = self._logs[player].append_pending(SubmittedAnswerEvent(text=text))
        self._drafts[player] = ""

        logger.info(f"Submitting answer for {player.value} in session {session_id}")
        instruction = build_answer_instruction(player.value, text)
        return await self._exchange(instruction, session_id, opening=False, pending=(player, index))

    def dismiss_winner(self) -> None:
        self._winner_revealed = False

    async def aclose(self) -> None:
        self._cancel_reveal()
        await self._channel.aclose()

    async def _exchange(
        self,
        instruction: str,
        session_id: str,
        opening: bool,
        pending: tuple[Player, int] | None = None,
    ) -> CallOutcome:
        self._busy = True
        try:
            await self._notify()
            result = await self._request(instruction, session_id)
            if result is None:
                outcome = CallOutcome.FAILED
            elif session_id != self._session_id:
                logger.warning(f"Discarded a late response for superseded session {session_id}")
                outcome = CallOutcome.DISCARDED
            else:
                if pending is not None:
                    player, index = pending
                    self._logs[player].settle(index)
                self._apply(result.snapshot, opening=opening)
                outcome = CallOutcome.APPLIED
        finally:
            self._busy = False
        await self._notify()
        return outcome

    async def _request(self, instruction: str, session_id: str) -> AgentResult | None:
        try:
            result = await self._channel.call(instruction, session_id)
        except AgentChannelError as exc:
            logger.warning(f"Agent call failed for session {session_id}: {exc}")
            return None
        if not result.success or result.snapshot is None:
            logger.warning(f"Agent reported status {result.status!r} for session {session_id}")
            return None
        return result

    def _apply(self, snapshot: GameSnapshot | None, opening: bool) -> None:
        if snapshot is None:
            return
        self._snapshot = snapshot
        for routed in route_snapshot(snapshot, opening=opening):
            self._logs[routed.player].append(routed.event)

        if snapshot.status is GameStatus.COMPLETED and snapshot.winner is not None:
            logger.info(f"Session {self._session_id} completed, winner {snapshot.winner.value}")
            self._schedule_reveal(self._session_id)

    def _schedule_reveal(self, session_id: str) -> None:
        self._cancel_reveal()
        self._reveal_task = asyncio.create_task(self._reveal_after_delay(session_id))

    async def _reveal_after_delay(self, session_id: str) -> None:
        try:
            await asyncio.sleep(WINNER_REVEAL_DELAY_S)
        except asyncio.CancelledError:
            return
        if session_id != self._session_id:
            return
        self._winner_revealed = True
        await self._notify()

    def _cancel_reveal(self) -> None:
        if self._reveal_task is not None and not self._reveal_task.done():
            self._reveal_task.cancel()
        self._reveal_task = None

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                await listener(self)
            except Exception as exc:
                logger.error(f"Change listener error: {exc}", exc_info=True)

