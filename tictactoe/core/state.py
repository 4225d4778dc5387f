"""
Session state for a tic-tac-toe match.

One SessionState exists per hosted match and is owned by that match's
MatchStateMachine.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any, Optional

from .board import Board, CellState
from .terminal import GameOutcome

# Reserved participant id of the automated opponent
BOT_ID = "BOT"


class Seat(IntEnum):
    """A player slot. Values match the wire encoding of `turn`."""
    ONE = 1
    TWO = 2

    @property
    def other(self) -> Seat:
        return Seat.TWO if self == Seat.ONE else Seat.ONE

    @property
    def marker(self) -> CellState:
        return CellState.SEAT_ONE if self == Seat.ONE else CellState.SEAT_TWO


class MatchMode(str, Enum):
    """Who occupies the seats."""
    PVP = "pvp"  # two humans
    PVC = "pvc"  # human in seat one, bot in seat two

    @classmethod
    def parse(cls, value: Any) -> MatchMode:
        """Parse a configured mode, falling back to PVP for anything unrecognized."""
        if isinstance(value, MatchMode):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        return cls.PVP


class MatchPhase(str, Enum):
    AWAITING_SEATS = "awaiting_seats"
    IN_PROGRESS = "in_progress"
    TERMINAL = "terminal"


def is_human(participant_id: str) -> bool:
    return participant_id != "" and participant_id != BOT_ID


@dataclass
class SessionState:
    """
    Complete state of one match.

    Attributes:
        board: Current board
        turn: Seat to move next
        seat_one: Participant id in seat one ("" until assigned)
        seat_two: Participant id or BOT_ID in seat two ("" until assigned)
        outcome: Game outcome, never changes once decided
        mode: PVP or PVC, fixed at creation
    """
    board: Board = field(default_factory=Board.empty)
    turn: Seat = Seat.ONE
    seat_one: str = ""
    seat_two: str = ""
    outcome: GameOutcome = GameOutcome.UNDECIDED
    mode: MatchMode = MatchMode.PVP

    @classmethod
    def new_session(cls, mode: Any = None) -> SessionState:
        """Create an empty session with mode taken from configuration."""
        return cls(mode=MatchMode.parse(mode))

    def seat_of(self, participant_id: str) -> Optional[Seat]:
        """Resolve a participant to their seat, or None."""
        if not participant_id:
            return None
        if participant_id == self.seat_one:
            return Seat.ONE
        if participant_id == self.seat_two:
            return Seat.TWO
        return None

    @property
    def human_count(self) -> int:
        return sum(1 for p in (self.seat_one, self.seat_two) if is_human(p))

    @property
    def seats_filled(self) -> bool:
        return self.seat_one != "" and self.seat_two != ""

    @property
    def phase(self) -> MatchPhase:
        if self.outcome.is_decided:
            return MatchPhase.TERMINAL
        if self.seats_filled:
            return MatchPhase.IN_PROGRESS
        return MatchPhase.AWAITING_SEATS

    @property
    def bot_to_move(self) -> bool:
        """True when the automated seat should play next."""
        return (
            self.mode == MatchMode.PVC
            and self.seat_two == BOT_ID
            and self.turn == Seat.TWO
            and not self.outcome.is_decided
        )

    def copy(self) -> SessionState:
        return replace(self)
