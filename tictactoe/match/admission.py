"""
Seat admission for a match.

check_join is the advisory pre-check run before a participant is let in;
assign_seats applies a confirmed join.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable

from ..core.state import BOT_ID, MatchMode, SessionState

logger = logging.getLogger(__name__)

REASON_MISSING_ID = "participant id required"
REASON_RESERVED_ID = "participant id is reserved"
REASON_ONE_HUMAN = "only one human participant allowed"
REASON_FULL = "session full"


@dataclass(frozen=True)
class AdmissionDecision:
    accepted: bool
    reason: str = ""


def check_join(state: SessionState, participant_id: str) -> AdmissionDecision:
    """Decide whether participant_id may join. Never mutates state."""
    if not participant_id:
        return AdmissionDecision(False, REASON_MISSING_ID)
    if participant_id == BOT_ID:
        return AdmissionDecision(False, REASON_RESERVED_ID)

    humans = state.human_count
    if state.mode == MatchMode.PVC and humans >= 1:
        return AdmissionDecision(False, REASON_ONE_HUMAN)
    if humans >= 2:
        return AdmissionDecision(False, REASON_FULL)
    return AdmissionDecision(True)


def assign_seats(state: SessionState, participant_ids: Iterable[str]) -> bool:
    """
    Seat confirmed participants in seat order.

    Seat one is filled first. In PVP a second human takes seat two; in PVC
    seat two goes to the bot as soon as seat one is occupied. Occupied seats
    are never reassigned. Returns True if any seat changed.
    """
    changed = False
    for pid in participant_ids:
        if not pid or pid == BOT_ID or state.seat_of(pid) is not None:
            continue
        if state.seat_one == "":
            state.seat_one = pid
            changed = True
            logger.info("Player 1 joined: %s", pid)
        elif state.seat_two == "" and state.mode == MatchMode.PVP:
            state.seat_two = pid
            changed = True
            logger.info("Player 2 joined: %s", pid)

    if state.mode == MatchMode.PVC and state.seat_one != "" and state.seat_two == "":
        state.seat_two = BOT_ID
        changed = True
        logger.info("BOT assigned as Player 2")

    return changed
