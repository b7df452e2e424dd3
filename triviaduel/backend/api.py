"""FastAPI endpoints for driving a trivia duel session and websocket sync."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Any, AsyncIterator

from fastapi import Depends, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from .channel import create_channel
from .config import load_settings
from .coordinator import SessionCoordinator
from .models import CallOutcome, Player
from .state import build_session_view

logger = logging.getLogger(__name__)


class AnswerEnvelope(BaseModel):
    player: Player
    text: str = Field(min_length=1, max_length=500)


class SessionStateResponse(BaseModel):
    state: dict[str, Any]


class SessionWebSocketHub:
    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)

    async def send_state(self, websocket: WebSocket, state: dict[str, Any]) -> None:
        await websocket.send_json({"type": "state.full", "state": state})

    async def broadcast_state(self, state: dict[str, Any]) -> None:
        stale_connections: list[WebSocket] = []
        for websocket in list(self._connections):
            try:
                await self.send_state(websocket, state)
            except RuntimeError:
                stale_connections.append(websocket)
        for websocket in stale_connections:
            self.disconnect(websocket)


def _default_coordinator() -> SessionCoordinator:
    return SessionCoordinator(channel=create_channel(load_settings()))


def _raise_for_outcome(outcome: CallOutcome, rejected_detail: str) -> None:
    if outcome is CallOutcome.REJECTED:
        raise HTTPException(status_code=409, detail=rejected_detail)
    if outcome is not CallOutcome.APPLIED:
        raise HTTPException(status_code=502, detail="Trivia agent request failed")


def create_app(coordinator: SessionCoordinator | None = None, auto_start: bool = False) -> FastAPI:
    session = coordinator if coordinator is not None else _default_coordinator()
    websocket_hub = SessionWebSocketHub()

    async def publish_state(changed: SessionCoordinator) -> None:
        await websocket_hub.broadcast_state(build_session_view(changed))

    session.subscribe(publish_state)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if auto_start:
            outcome = await session.start_session()
            logger.info(f"Initial session start finished: {outcome.value}")
        yield
        await session.aclose()

    app = FastAPI(title="Trivia Duel API", version="0.1.0", lifespan=lifespan)
    app.state.websocket_hub = websocket_hub
    app.state.coordinator = session

    def get_coordinator() -> SessionCoordinator:
        return session

    @app.get("/api/session", response_model=SessionStateResponse)
    def get_session(local: SessionCoordinator = Depends(get_coordinator)) -> SessionStateResponse:
        return SessionStateResponse(state=build_session_view(local))

    @app.post("/api/session", response_model=SessionStateResponse)
    async def start_session(local: SessionCoordinator = Depends(get_coordinator)) -> SessionStateResponse:
        outcome = await local.start_session()
        _raise_for_outcome(outcome, rejected_detail="A request is already in flight")
        return SessionStateResponse(state=build_session_view(local))

    @app.post("/api/session/answers", response_model=SessionStateResponse)
    async def post_answer(
        payload: AnswerEnvelope,
        local: SessionCoordinator = Depends(get_coordinator),
    ) -> SessionStateResponse:
        outcome = await local.submit_answer(payload.player, payload.text)
        _raise_for_outcome(outcome, rejected_detail="Answer not allowed")
        return SessionStateResponse(state=build_session_view(local))

    @app.post("/api/session/winner/dismiss", response_model=SessionStateResponse)
    async def dismiss_winner(local: SessionCoordinator = Depends(get_coordinator)) -> SessionStateResponse:
        local.dismiss_winner()
        state = build_session_view(local)
        await websocket_hub.broadcast_state(state)
        return SessionStateResponse(state=state)

    @app.websocket("/ws/session")
    async def session_ws(websocket: WebSocket, local: SessionCoordinator = Depends(get_coordinator)) -> None:
        await websocket_hub.connect(websocket)
        await websocket_hub.send_state(websocket, build_session_view(local))

        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            websocket_hub.disconnect(websocket)

    return app


app = create_app(auto_start=load_settings().auto_start)
