"""Backend package for the trivia duel client."""

from .channel import AgentChannel, AgentChannelError, HttpAgentChannel, create_channel, parse_agent_response
from .config import BackendSettings, load_settings
from .conversation import ConversationLog, route_snapshot
from .coordinator import SessionCoordinator
from .identity import generate_session_id
from .models import CallOutcome, GameSnapshot, GameStatus, Player
from .state import build_session_view

__all__ = [
    "AgentChannel",
    "AgentChannelError",
    "BackendSettings",
    "build_session_view",
    "CallOutcome",
    "ConversationLog",
    "create_channel",
    "GameSnapshot",
    "GameStatus",
    "generate_session_id",
    "HttpAgentChannel",
    "load_settings",
    "parse_agent_response",
    "Player",
    "route_snapshot",
    "SessionCoordinator",
]
