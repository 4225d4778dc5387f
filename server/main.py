"""
FastAPI server hosting tic-tac-toe matches.

Provides REST endpoints for match management and a WebSocket per match for
real-time play.
"""

from __future__ import annotations
import json
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, Optional

import numpy as np
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from tictactoe import __version__
from tictactoe.match.encoder import SnapshotPayload

from .config import settings
from .match_handler import MatchHandler

logger = logging.getLogger(__name__)

# Close codes for rejected websocket connections
CLOSE_MATCH_NOT_FOUND = 4004
CLOSE_JOIN_REJECTED = 4003


# --- Pydantic Models ---

class CreateMatchRequest(BaseModel):
    mode: Optional[Any] = "pvp"


class CreateMatchResponse(BaseModel):
    match_id: str
    mode: str


class MatchSummary(BaseModel):
    match_id: str
    mode: str
    phase: str
    p1: str
    p2: str
    connected: int


class MatchListResponse(BaseModel):
    matches: list[MatchSummary]


class JoinAttemptRequest(BaseModel):
    user_id: str


class JoinAttemptResponse(BaseModel):
    accepted: bool
    reason: str


class ClientFrame(BaseModel):
    op_code: int
    data: Any = None


class HealthResponse(BaseModel):
    status: str
    version: str
    matches: int


# --- Match Storage ---

# Live matches; each one is independent of the others
matches: dict[str, MatchHandler] = {}

# Seeded once per process; every match draws its own child generator
_seed_sequence = np.random.SeedSequence(settings.bot_seed)


def create_match(mode: Any = None) -> MatchHandler:
    match_id = str(uuid.uuid4())[:8]
    rng = np.random.default_rng(_seed_sequence.spawn(1)[0])
    handler = MatchHandler(
        match_id=match_id,
        mode=mode,
        bot_delay_sec=settings.bot_delay_sec,
        rng=rng
    )
    matches[match_id] = handler
    logger.info("Created match %s (%s)", match_id, handler.state.mode.value)
    return handler


def get_match(match_id: str) -> MatchHandler:
    if match_id not in matches:
        raise HTTPException(status_code=404, detail="Match not found")
    return matches[match_id]


# --- App Setup ---

@asynccontextmanager
async def lifespan(app: FastAPI):
    """App lifespan handler."""
    logger.info("Tic-Tac-Toe match handler registered")

    yield

    # Shutdown: terminate live matches
    for handler in list(matches.values()):
        await handler.terminate()
    matches.clear()


app = FastAPI(
    title="Tic-Tac-Toe Match Server",
    description="Authoritative tic-tac-toe matches with a minimax opponent",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- REST Endpoints ---

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="ok", version=__version__, matches=len(matches))


@app.post("/matches", response_model=CreateMatchResponse)
async def create_match_endpoint(request: CreateMatchRequest = None):
    """Create a new match."""
    if request is None:
        request = CreateMatchRequest()
    handler = create_match(request.mode)
    return CreateMatchResponse(match_id=handler.match_id, mode=handler.state.mode.value)


@app.get("/matches", response_model=MatchListResponse)
async def list_matches():
    """List live matches."""
    return MatchListResponse(
        matches=[MatchSummary(**h.summary()) for h in matches.values()]
    )


@app.get("/matches/{match_id}", response_model=SnapshotPayload)
async def get_match_state(match_id: str):
    """Get the current snapshot of a match."""
    return get_match(match_id).machine.snapshot()


@app.post("/matches/{match_id}/join-attempt", response_model=JoinAttemptResponse)
async def join_attempt(match_id: str, request: JoinAttemptRequest):
    """Check whether a participant would be admitted. Does not seat them."""
    decision = get_match(match_id).join_attempt(request.user_id)
    return JoinAttemptResponse(accepted=decision.accepted, reason=decision.reason)


@app.delete("/matches/{match_id}")
async def terminate_match(match_id: str):
    """Terminate a match and drop it from the registry."""
    handler = matches.pop(match_id, None)
    if handler is None:
        raise HTTPException(status_code=404, detail="Match not found")
    await handler.terminate()
    return {"terminated": match_id}


# --- WebSocket ---

@app.websocket("/matches/{match_id}/ws")
async def websocket_endpoint(websocket: WebSocket, match_id: str, user_id: str = ""):
    """WebSocket endpoint for playing a match."""
    handler = matches.get(match_id)
    if handler is None:
        await websocket.close(code=CLOSE_MATCH_NOT_FOUND, reason="Match not found")
        return

    await websocket.accept()
    decision = await handler.join(websocket, user_id)
    if not decision.accepted:
        await websocket.close(code=CLOSE_JOIN_REJECTED, reason=decision.reason)
        return

    try:
        while not handler.terminated:
            raw = await websocket.receive_text()
            try:
                frame = ClientFrame.model_validate_json(raw)
            except ValidationError as e:
                logger.error("Malformed frame from %s: %s", user_id, e)
                continue

            data = frame.data
            if isinstance(data, (dict, str)):
                await handler.handle_message(user_id, frame.op_code, data)
            else:
                await handler.handle_message(user_id, frame.op_code, json.dumps(data))

    except WebSocketDisconnect:
        pass
    finally:
        await handler.leave(websocket)


# --- Entry Point ---

def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the server."""
    import uvicorn
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    uvicorn.run(app, host=host or settings.host, port=port or settings.port)


if __name__ == "__main__":
    run_server()
