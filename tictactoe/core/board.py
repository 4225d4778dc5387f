"""
Board representation for tic-tac-toe.

Board layout (3 rows x 3 cols, row-major):

  row 0 | (0,0) (0,1) (0,2)
  row 1 | (1,0) (1,1) (1,2)
  row 2 | (2,0) (2,1) (2,2)

Boards are immutable: placing a marker returns a new Board, so search
branches never share a mutable buffer.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Sequence

# Board dimensions
ROWS = 3
COLS = 3
NUM_CELLS = ROWS * COLS  # 9


class CellState(IntEnum):
    """Contents of a single cell. Values match the wire encoding."""
    EMPTY = 0
    SEAT_ONE = 1
    SEAT_TWO = 2


CELL_SYMBOLS = {
    CellState.EMPTY: ".",
    CellState.SEAT_ONE: "X",
    CellState.SEAT_TWO: "O",
}


def in_bounds(row: int, col: int) -> bool:
    """Check that (row, col) addresses a cell on the board."""
    return 0 <= row < ROWS and 0 <= col < COLS


def rowcol_to_index(row: int, col: int) -> int:
    """Convert (row, col) to a flat cell index."""
    return row * COLS + col


def index_to_rowcol(index: int) -> tuple[int, int]:
    """Convert a flat cell index to (row, col)."""
    return index // COLS, index % COLS


@dataclass(frozen=True)
class Board:
    """
    A 3x3 grid of cells stored as a flat row-major tuple.

    Attributes:
        cells: Tuple of NUM_CELLS CellState values
    """
    cells: tuple[CellState, ...] = (CellState.EMPTY,) * NUM_CELLS

    def __post_init__(self):
        if len(self.cells) != NUM_CELLS:
            raise ValueError(f"Board needs {NUM_CELLS} cells, got {len(self.cells)}")

    @classmethod
    def empty(cls) -> Board:
        """Create an empty board."""
        return cls()

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> Board:
        """Build a board from a 3x3 nested sequence of cell codes (0/1/2)."""
        if len(rows) != ROWS or any(len(r) != COLS for r in rows):
            raise ValueError("Board rows must be 3x3")
        return cls(tuple(CellState(v) for r in rows for v in r))

    def to_rows(self) -> list[list[int]]:
        """Convert to a 3x3 list of plain ints (wire format)."""
        return [
            [int(self.cells[rowcol_to_index(r, c)]) for c in range(COLS)]
            for r in range(ROWS)
        ]

    def get(self, row: int, col: int) -> CellState:
        return self.cells[rowcol_to_index(row, col)]

    def is_empty(self, row: int, col: int) -> bool:
        return self.get(row, col) == CellState.EMPTY

    def place(self, row: int, col: int, marker: CellState) -> Board:
        """
        Return a new board with marker placed at (row, col).

        Raises ValueError if the cell is already occupied or the marker is
        EMPTY, since cells never revert to empty.
        """
        if marker == CellState.EMPTY:
            raise ValueError("Cannot place an empty marker")
        if not self.is_empty(row, col):
            raise ValueError(f"Cell ({row}, {col}) is already occupied")
        idx = rowcol_to_index(row, col)
        return Board(self.cells[:idx] + (marker,) + self.cells[idx + 1:])

    def empty_cells(self) -> Iterator[tuple[int, int]]:
        """Yield (row, col) of each empty cell in row-major order."""
        for idx, cell in enumerate(self.cells):
            if cell == CellState.EMPTY:
                yield index_to_rowcol(idx)

    def is_full(self) -> bool:
        return all(cell != CellState.EMPTY for cell in self.cells)

    def __repr__(self) -> str:
        """Pretty print the board."""
        lines = []
        for row in range(ROWS):
            line = f"{row} |"
            for col in range(COLS):
                line += " " + CELL_SYMBOLS[self.get(row, col)]
            lines.append(line)
        lines.append("  +" + "-" * (COLS * 2))
        lines.append("    " + " ".join(str(c) for c in range(COLS)))
        return "\n".join(lines)
