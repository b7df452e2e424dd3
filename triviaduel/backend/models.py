"""Domain models for agent snapshots, call results and conversation events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Player(str, Enum):
    P1 = "Player 1"
    P2 = "Player 2"


class GameStatus(str, Enum):
    ACTIVE = "in_progress"
    COMPLETED = "completed"


class CallOutcome(str, Enum):
    APPLIED = "applied"
    FAILED = "failed"
    REJECTED = "rejected"
    DISCARDED = "discarded"


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Question(_WireModel):
    text: str
    category: str = ""


class AnswerOutcome(_WireModel):
    player: Player
    answer_given: str = ""
    correct_answer: str = ""
    is_correct: bool
    points_awarded: int = 0


class Scoreboard(_WireModel):
    p1: int = Field(default=0, alias="player1")
    p2: int = Field(default=0, alias="player2")

    def score_for(self, player: Player) -> int:
        return self.p1 if player is Player.P1 else self.p2


class LeaderboardEntry(_WireModel):
    player: Player
    score: int = 0


class GameSnapshot(_WireModel):
    """Authoritative game state returned by the agent after every call."""

    status: GameStatus = Field(alias="game_status")
    round: int = Field(default=1, alias="current_round")
    turn: Player = Field(alias="current_turn")
    question: Question | None = None
    last_outcome: AnswerOutcome | None = Field(default=None, alias="last_answer_result")
    scores: Scoreboard = Field(default_factory=Scoreboard)
    leaderboard: tuple[LeaderboardEntry, ...] = Field(default=(), max_length=2)
    winner: Player | None = None
    message: str = Field(default="", alias="game_message")

    @model_validator(mode="after")
    def _check_status_invariants(self) -> "GameSnapshot":
        if self.status is GameStatus.COMPLETED and self.winner is None:
            raise ValueError("completed snapshot requires a winner")
        if self.status is GameStatus.ACTIVE and self.question is None:
            raise ValueError("active snapshot requires a question")
        return self


@dataclass(frozen=True)
class AgentResult:
    success: bool
    status: str
    snapshot: GameSnapshot | None = None


@dataclass(frozen=True)
class QuestionEvent:
    text: str
    kind: str = "question"


@dataclass(frozen=True)
class SubmittedAnswerEvent:
    text: str
    kind: str = "answer"


@dataclass(frozen=True)
class ResultEvent:
    text: str
    is_correct: bool
    kind: str = "result"


ConversationEvent = QuestionEvent | SubmittedAnswerEvent | ResultEvent
