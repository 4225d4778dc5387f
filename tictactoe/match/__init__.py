"""Match hosting logic: admission, state machine and wire payloads."""

from .admission import AdmissionDecision, check_join, assign_seats
from .encoder import OpCode, SnapshotPayload, MoveMessage, encode_snapshot, decode_move
from .machine import MatchStateMachine
