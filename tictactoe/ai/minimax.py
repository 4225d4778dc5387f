"""
Exhaustive minimax search for the automated opponent.

The bot always plays seat two. Scores are from seat two's perspective:
  - seat two wins:  WIN_SCORE - depth  (prefer faster wins)
  - seat one wins:  depth - WIN_SCORE  (delay losses)
  - draw:           0

Every branch works on its own immutable Board, so no branch can observe
another branch's markers.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.board import Board, CellState
from ..core.terminal import GameOutcome, detect_outcome

logger = logging.getLogger(__name__)

WIN_SCORE = 10


@dataclass
class BotConfig:
    """Configuration for the minimax bot."""
    win_score: int = WIN_SCORE
    seed: Optional[int] = None  # seed for the random fallback; None = OS entropy
    use_cache: bool = True  # memoize positions within a single search


class MinimaxSearch:
    """
    One full-depth search from a root board.

    Holds the per-search transposition cache and node counter; a new instance
    is created for every decision so nothing is shared between matches.
    """

    def __init__(self, win_score: int = WIN_SCORE, use_cache: bool = True):
        self.win_score = win_score
        self.use_cache = use_cache
        self.nodes_searched = 0
        self._cache: dict[tuple[Board, int, bool], int] = {}

    def score(self, board: Board, depth: int, maximizing: bool) -> int:
        """Minimax value of board with seat two maximizing."""
        key = (board, depth, maximizing)
        if self.use_cache and key in self._cache:
            return self._cache[key]

        self.nodes_searched += 1
        outcome = detect_outcome(board)
        if outcome == GameOutcome.SEAT_TWO_WINS:
            value = self.win_score - depth
        elif outcome == GameOutcome.SEAT_ONE_WINS:
            value = depth - self.win_score
        elif outcome == GameOutcome.DRAW:
            value = 0
        elif maximizing:
            value = max(
                self.score(board.place(r, c, CellState.SEAT_TWO), depth + 1, False)
                for r, c in board.empty_cells()
            )
        else:
            value = min(
                self.score(board.place(r, c, CellState.SEAT_ONE), depth + 1, True)
                for r, c in board.empty_cells()
            )

        if self.use_cache:
            self._cache[key] = value
        return value

    def root_scores(self, board: Board) -> list[tuple[tuple[int, int], int]]:
        """Score every seat-two candidate move in row-major order."""
        return [
            ((r, c), self.score(board.place(r, c, CellState.SEAT_TWO), 0, False))
            for r, c in board.empty_cells()
        ]


class MinimaxBot:
    """
    Decision engine for the automated seat.

    The randomness source is injected (or seeded from config) once per bot,
    and is only used by the fallback path.
    """

    def __init__(
        self,
        config: Optional[BotConfig] = None,
        rng: Optional[np.random.Generator] = None
    ):
        self.config = config or BotConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.last_nodes_searched = 0

    def choose_move(self, board: Board) -> tuple[int, int]:
        """
        Pick the cell seat two should play.

        Ties keep the first candidate in row-major order. Raises ValueError
        on a board with no empty cell.
        """
        if board.is_full():
            raise ValueError("No empty cell to play")

        search = MinimaxSearch(self.config.win_score, self.config.use_cache)
        best_score = None
        best_move = None
        for move, score in search.root_scores(board):
            if best_score is None or score > best_score:
                best_score = score
                best_move = move
        self.last_nodes_searched = search.nodes_searched

        if best_move is None:
            return self.random_move(board)

        logger.debug(
            "Minimax picked %s with score %s (%d nodes)",
            best_move, best_score, search.nodes_searched
        )
        return best_move

    def random_move(self, board: Board) -> tuple[int, int]:
        """Uniformly random empty cell."""
        choices = list(board.empty_cells())
        if not choices:
            raise ValueError("No empty cell to play")
        return choices[int(self.rng.integers(len(choices)))]
