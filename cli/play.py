#!/usr/bin/env python3
"""
Terminal-based tic-tac-toe client.

Play against the minimax bot, or hot-seat against another human.
"""

from __future__ import annotations
import argparse
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tictactoe.ai.minimax import MinimaxBot, BotConfig
from tictactoe.core.board import Board, CELL_SYMBOLS, COLS, ROWS
from tictactoe.core.state import MatchMode, Seat
from tictactoe.core.terminal import GameOutcome
from tictactoe.match.encoder import SnapshotPayload
from tictactoe.match.machine import MatchStateMachine

PLAYER_ONE_ID = "player1"
PLAYER_TWO_ID = "player2"


def print_snapshot(payload: SnapshotPayload) -> None:
    """Print the board from a published snapshot."""
    board = Board.from_rows(payload.board)
    print()
    print("    " + " ".join(str(c) for c in range(COLS)))
    print("  +" + "-" * (COLS * 2 + 1) + "+")
    for row in range(ROWS):
        line = f"{row} |"
        for col in range(COLS):
            line += " " + CELL_SYMBOLS[board.get(row, col)]
        line += " |"
        print(line)
    print("  +" + "-" * (COLS * 2 + 1) + "+")
    print()


def parse_user_move(input_str: str):
    """Parse 'row col' (or 'row,col') into a tuple, or a command string."""
    input_str = input_str.strip().lower()

    if input_str in ['q', 'quit', 'exit']:
        return 'quit'
    if input_str in ['h', 'help', '?']:
        return 'help'

    parts = input_str.replace(',', ' ').split()
    if len(parts) != 2:
        print(f"Invalid format: {input_str}. Use 'row col', e.g. '1 1'")
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        print(f"Invalid format: {input_str}. Use 'row col', e.g. '1 1'")
        return None


def play(mode: MatchMode, seed: int | None = None) -> GameOutcome:
    """Play one game in the terminal and return its outcome."""
    bot = MinimaxBot(BotConfig(seed=seed))
    machine = MatchStateMachine(mode=mode, bot=bot, publish=print_snapshot)

    print("\n=== Tic-Tac-Toe ===")
    if mode == MatchMode.PVC:
        print("You are X (player 1), the bot is O (player 2)")
        machine.join([PLAYER_ONE_ID])
    else:
        print("Hot seat: X is player 1, O is player 2")
        machine.join([PLAYER_ONE_ID, PLAYER_TWO_ID])
    print("Commands: 'row col' to play, 'h' help, 'q' quit")

    while not machine.state.outcome.is_decided:
        seat = machine.state.turn
        player_id = PLAYER_ONE_ID if seat == Seat.ONE else PLAYER_TWO_ID
        try:
            user_input = input(f"Player {int(seat)} ({CELL_SYMBOLS[seat.marker]}) > ")
        except EOFError:
            machine.leave([player_id])
            break

        result = parse_user_move(user_input)
        if result == 'quit':
            machine.leave([player_id])
            break
        elif result == 'help':
            print("Enter a cell as 'row col' with rows and columns numbered 0-2")
        elif result is not None:
            row, col = result
            if not machine.process_move(player_id, row, col):
                print(f"Illegal move: {row} {col}")

    outcome = machine.state.outcome
    if outcome == GameOutcome.SEAT_ONE_WINS:
        print("Player 1 (X) wins!")
    elif outcome == GameOutcome.SEAT_TWO_WINS:
        print("Bot wins. Better luck next time!" if mode == MatchMode.PVC else "Player 2 (O) wins!")
    else:
        print("Game drawn.")
    machine.terminate()
    return outcome


def main():
    parser = argparse.ArgumentParser(description='Tic-Tac-Toe Terminal Client')
    parser.add_argument('--mode', type=str, choices=['pvp', 'pvc'], default='pvc',
                        help='pvc to play the bot, pvp for hot seat')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the bot fallback randomness')

    args = parser.parse_args()
    play(MatchMode.parse(args.mode), args.seed)


if __name__ == '__main__':
    main()
