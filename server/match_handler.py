"""
Per-match adapter between the web host and the match state machine.

Every callback for one match runs under that match's asyncio.Lock, so at most
one state mutation is in flight per match. The bot's reply in PVC mode is
scheduled as a separate task that waits out the pacing delay without holding
the lock, then plays under the lock.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Any, Optional

import numpy as np
from fastapi import WebSocket

from tictactoe.ai.minimax import MinimaxBot
from tictactoe.match.admission import AdmissionDecision
from tictactoe.match.encoder import OpCode, SnapshotPayload
from tictactoe.match.machine import MatchStateMachine

logger = logging.getLogger(__name__)

CLOSE_MATCH_TERMINATED = 1001
REASON_TERMINATED = "match terminated"


class MatchHandler:
    """Represents an active hosted match."""

    def __init__(
        self,
        match_id: str,
        mode: Any = None,
        bot_delay_sec: float = 0.5,
        rng: Optional[np.random.Generator] = None
    ):
        self.match_id = match_id
        self.bot_delay_sec = bot_delay_sec
        self.lock = asyncio.Lock()
        self.websockets: list[WebSocket] = []
        self.participants: dict[int, str] = {}  # id(websocket) -> user id
        self._outbox: list[SnapshotPayload] = []
        self._bot_task: Optional[asyncio.Task] = None
        self.terminated = False
        self.machine = MatchStateMachine(
            mode=mode,
            bot=MinimaxBot(rng=rng),
            publish=self._outbox.append
        )

    @property
    def state(self):
        return self.machine.state

    def summary(self) -> dict:
        state = self.machine.state
        return {
            "match_id": self.match_id,
            "mode": state.mode.value,
            "phase": state.phase.value,
            "p1": state.seat_one,
            "p2": state.seat_two,
            "connected": len(self.websockets),
        }

    def join_attempt(self, user_id: str) -> AdmissionDecision:
        return self.machine.join_attempt(user_id)

    async def join(self, websocket: WebSocket, user_id: str) -> AdmissionDecision:
        """Admit and seat a participant, then broadcast the state."""
        async with self.lock:
            if self.terminated:
                return AdmissionDecision(False, REASON_TERMINATED)
            decision = self.machine.join_attempt(user_id)
            if not decision.accepted:
                return decision
            self.websockets.append(websocket)
            self.participants[id(websocket)] = user_id
            self.machine.join([user_id])
            await self._flush()
        return decision

    async def leave(self, websocket: WebSocket) -> None:
        """Drop a participant's socket and end an undecided game as a draw."""
        async with self.lock:
            self.websockets = [ws for ws in self.websockets if ws is not websocket]
            user_id = self.participants.pop(id(websocket), None)
            if user_id is None:
                return
            self.machine.leave([user_id])
            self._cancel_bot()
            await self._flush()

    async def handle_message(self, user_id: str, op_code: int, data: Any) -> bool:
        """Feed one participant message to the state machine."""
        async with self.lock:
            if self.terminated:
                return False
            changed = self.machine.handle_message(op_code, user_id, data, defer_bot=True)
            await self._flush()
            if self.machine.bot_pending:
                self._schedule_bot()
        return changed

    def _schedule_bot(self) -> None:
        if self.terminated:
            return
        if self._bot_task is not None and not self._bot_task.done():
            return
        self._bot_task = asyncio.create_task(self._bot_reply())
        logger.debug("Scheduled BOT reply for match %s in %.2fs", self.match_id, self.bot_delay_sec)

    async def _bot_reply(self) -> None:
        if self.bot_delay_sec > 0:
            await asyncio.sleep(self.bot_delay_sec)
        async with self.lock:
            if self.terminated:
                return
            self.machine.play_bot_turn()
            await self._flush()

    def _cancel_bot(self) -> None:
        if self._bot_task is not None and not self._bot_task.done():
            self._bot_task.cancel()
        self._bot_task = None

    async def _flush(self) -> None:
        """Broadcast queued snapshots to all connected participants."""
        pending = list(self._outbox)
        self._outbox.clear()
        for payload in pending:
            await self.broadcast(payload)

    async def broadcast(self, payload: SnapshotPayload) -> None:
        message = {
            "op_code": int(OpCode.STATE),
            "data": payload.model_dump()
        }
        disconnected = []
        for ws in self.websockets:
            try:
                await ws.send_json(message)
            except Exception:
                disconnected.append(ws)

        if disconnected:
            logger.info("Dropping %d disconnected socket(s) from match %s", len(disconnected), self.match_id)
            self.websockets = [ws for ws in self.websockets if all(ws is not d for d in disconnected)]

    async def terminate(self) -> None:
        """Stop accepting input and close every connected socket."""
        self.terminated = True
        self._cancel_bot()
        async with self.lock:
            self.machine.terminate()
            sockets = self.websockets
            self.websockets = []
            self.participants.clear()
            for ws in sockets:
                try:
                    await ws.close(code=CLOSE_MATCH_TERMINATED, reason=REASON_TERMINATED)
                except Exception as e:
                    logger.info("Socket in match %s already closed: %s", self.match_id, e)
