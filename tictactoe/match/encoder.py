"""
Wire payloads exchanged with match participants.

Op codes:
  0 = state snapshot (server -> participants)
  1 = move (participant -> server)
"""

from __future__ import annotations
from enum import IntEnum
from typing import Union

from pydantic import BaseModel, ConfigDict

from ..core.state import SessionState


class OpCode(IntEnum):
    STATE = 0
    MOVE = 1


class SnapshotPayload(BaseModel):
    board: list[list[int]]  # 0 = empty, 1 = seat one, 2 = seat two
    turn: int
    p1: str
    p2: str
    winner: int  # 0 = undecided, 1/2 = seat win, 3 = draw
    mode: str


class MoveMessage(BaseModel):
    model_config = ConfigDict(strict=True)  # plain JSON integers only

    row: int
    col: int


def snapshot(state: SessionState) -> SnapshotPayload:
    """Build the snapshot payload for a session."""
    return SnapshotPayload(
        board=state.board.to_rows(),
        turn=int(state.turn),
        p1=state.seat_one,
        p2=state.seat_two,
        winner=int(state.outcome),
        mode=state.mode.value,
    )


def encode_snapshot(state: SessionState) -> bytes:
    """Serialize a session to the JSON bytes broadcast with OpCode.STATE."""
    return snapshot(state).model_dump_json().encode("utf-8")


def decode_move(data: Union[bytes, str, dict]) -> MoveMessage:
    """
    Decode a move payload.

    Raises pydantic.ValidationError for malformed JSON or missing/non-integer
    fields.
    """
    if isinstance(data, dict):
        return MoveMessage.model_validate(data)
    return MoveMessage.model_validate_json(data)
