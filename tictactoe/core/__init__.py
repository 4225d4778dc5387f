"""Core game logic: board, terminal detection and session state."""

from .board import Board, CellState
from .terminal import GameOutcome, detect_outcome
from .state import BOT_ID, MatchMode, MatchPhase, Seat, SessionState
