"""
Win and terminal detection.

The detector is a pure function over a Board. Its "no decision yet" value is
GameOutcome.UNDECIDED, kept separate from CellState.EMPTY.
"""

from __future__ import annotations
from enum import IntEnum

from .board import Board, CellState


class GameOutcome(IntEnum):
    """Result of a game. Values match the wire encoding of `winner`."""
    UNDECIDED = 0
    SEAT_ONE_WINS = 1
    SEAT_TWO_WINS = 2
    DRAW = 3

    @property
    def is_decided(self) -> bool:
        return self != GameOutcome.UNDECIDED


# Fixed scan order: rows 0-2, columns 0-2, main diagonal, anti diagonal
LINES: tuple[tuple[tuple[int, int], ...], ...] = (
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    ((0, 0), (1, 1), (2, 2)),
    ((0, 2), (1, 1), (2, 0)),
)

_WIN_FOR_MARKER = {
    CellState.SEAT_ONE: GameOutcome.SEAT_ONE_WINS,
    CellState.SEAT_TWO: GameOutcome.SEAT_TWO_WINS,
}


def winning_line(board: Board):
    """Return the first completed line in scan order, or None."""
    for line in LINES:
        (r0, c0), (r1, c1), (r2, c2) = line
        v = board.get(r0, c0)
        if v != CellState.EMPTY and v == board.get(r1, c1) and v == board.get(r2, c2):
            return line
    return None


def detect_outcome(board: Board) -> GameOutcome:
    """
    Decide the outcome of a board.

    Returns the win of the first completed line in scan order, DRAW when every
    cell is occupied with no completed line, UNDECIDED otherwise.
    """
    line = winning_line(board)
    if line is not None:
        r, c = line[0]
        return _WIN_FOR_MARKER[board.get(r, c)]
    if board.is_full():
        return GameOutcome.DRAW
    return GameOutcome.UNDECIDED
