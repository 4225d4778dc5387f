"""
Match state machine.

Owns the SessionState of one match and applies join, leave and move events
to it. Phases run AWAITING_SEATS -> IN_PROGRESS -> TERMINAL and nothing
leaves TERMINAL.

Illegal moves are ignored without feedback; the only observable effect is
that no snapshot is published.
"""

from __future__ import annotations
import logging
from typing import Any, Callable, Iterable, Optional, Union

from pydantic import ValidationError

from ..ai.minimax import MinimaxBot
from ..core.board import in_bounds
from ..core.state import MatchMode, MatchPhase, Seat, SessionState
from ..core.terminal import GameOutcome, detect_outcome
from .admission import AdmissionDecision, assign_seats, check_join
from .encoder import OpCode, SnapshotPayload, decode_move, snapshot

logger = logging.getLogger(__name__)

Publisher = Callable[[SnapshotPayload], None]


class MatchStateMachine:
    """
    Authoritative game logic for one match.

    Args:
        mode: Configured mode ("pvp" / "pvc"); unrecognized values mean PVP
        bot: Decision engine for the automated seat (created on demand in PVC)
        publish: Called with a SnapshotPayload after each state change
    """

    def __init__(
        self,
        mode: Any = None,
        bot: Optional[MinimaxBot] = None,
        publish: Optional[Publisher] = None
    ):
        self.state = SessionState.new_session(mode)
        self.bot = bot
        if self.bot is None and self.state.mode == MatchMode.PVC:
            self.bot = MinimaxBot()
        self.publish = publish
        logger.info("Match initialized with mode: %s", self.state.mode.value)

    @property
    def phase(self) -> MatchPhase:
        return self.state.phase

    @property
    def bot_pending(self) -> bool:
        """True when the automated seat owes a move."""
        return self.state.bot_to_move

    def snapshot(self) -> SnapshotPayload:
        return snapshot(self.state)

    def _publish(self) -> None:
        if self.publish is not None:
            self.publish(self.snapshot())

    # --- Seats ---

    def join_attempt(self, participant_id: str) -> AdmissionDecision:
        """Advisory admission check; does not change state."""
        decision = check_join(self.state, participant_id)
        if not decision.accepted:
            logger.warning("Join rejected for %s: %s", participant_id, decision.reason)
        return decision

    def join(self, participant_ids: Iterable[str]) -> bool:
        """Seat confirmed participants and publish the full state."""
        changed = assign_seats(self.state, participant_ids)
        self._publish()
        return changed

    def leave(self, participant_ids: Iterable[str]) -> bool:
        """
        Handle departures. An undecided game ends as a draw.

        Returns True if the outcome changed.
        """
        for pid in participant_ids:
            logger.info("Player left: %s", pid)
        if self.state.outcome.is_decided:
            return False
        self.state.outcome = GameOutcome.DRAW
        logger.info("Game ended by departure, recorded as draw")
        self._publish()
        return True

    # --- Moves ---

    def handle_message(
        self,
        op_code: int,
        participant_id: str,
        data: Union[bytes, str, dict],
        defer_bot: bool = False
    ) -> bool:
        """
        Process one incoming message. Only OpCode.MOVE is acted on.

        Undecodable payloads are logged and dropped. Returns True if the
        state changed.
        """
        if op_code != OpCode.MOVE:
            return False
        try:
            move = decode_move(data)
        except (ValidationError, ValueError) as e:
            logger.error("Failed to decode move from %s: %s", participant_id, e)
            return False
        return self.process_move(participant_id, move.row, move.col, defer_bot=defer_bot)

    def process_move(
        self,
        participant_id: str,
        row: int,
        col: int,
        defer_bot: bool = False
    ) -> bool:
        """
        Apply a move from participant_id at (row, col).

        In PVC the bot replies within the same call unless defer_bot is set,
        in which case the caller must later call play_bot_turn. Exactly one
        snapshot is published if the state changed. Returns True on change.
        """
        if not in_bounds(row, col):
            logger.warning("Invalid move coordinates: row=%d, col=%d", row, col)
            return False

        seat = self.state.seat_of(participant_id)
        if seat is None:
            return False
        if self.state.mode == MatchMode.PVC and seat != Seat.ONE:
            return False

        if (
            seat != self.state.turn
            or not self.state.board.is_empty(row, col)
            or self.state.outcome.is_decided
        ):
            return False

        self._apply(seat, row, col)
        logger.info("Player %d played at [%d, %d]", seat, row, col)

        if self.state.bot_to_move and not defer_bot:
            self._bot_move()

        self._publish()
        return True

    def play_bot_turn(self) -> bool:
        """Play the automated seat's pending move, if any, and publish."""
        if not self.state.bot_to_move:
            return False
        self._bot_move()
        self._publish()
        return True

    def _apply(self, seat: Seat, row: int, col: int) -> None:
        self.state.board = self.state.board.place(row, col, seat.marker)
        outcome = detect_outcome(self.state.board)
        if outcome.is_decided:
            self.state.outcome = outcome
            logger.info("Game ended with winner: %d", outcome)
        else:
            self.state.turn = seat.other

    def _bot_move(self) -> None:
        row, col = self.bot.choose_move(self.state.board)
        self._apply(Seat.TWO, row, col)
        logger.info("BOT played at [%d, %d]", row, col)

    def terminate(self) -> None:
        logger.info("Match terminated")
