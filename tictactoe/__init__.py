"""Tic-tac-toe match engine: rules, minimax bot and session state machine."""

__version__ = "0.1.0"
