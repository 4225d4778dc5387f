"""Web host for tic-tac-toe matches."""
