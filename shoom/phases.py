"""
Show phase state machine

The show is a linear pipeline intro -> roundA -> roundB -> ad -> voting,
advanced either by the operator (admin actions) or by the ticker when a
phase's clock runs out. Every function here mutates a room synchronously
and never awaits, so a room is never observed half-updated.
"""
import logging
from typing import NamedTuple, Optional

from .models import Phase, Player, RoomState

logger = logging.getLogger("shoom")


class Segment(NamedTuple):
    phase: Phase
    seconds: int
    player: Optional[Player]


INTRO = Segment(Phase.INTRO, 15, None)
ROUND_A = Segment(Phase.ROUND_A, 45, Player.A)
ROUND_B = Segment(Phase.ROUND_B, 45, Player.B)
AD_BREAK = Segment(Phase.AD, 5, None)
VOTING = Segment(Phase.VOTING, 0, None)

# Phase that follows each timed phase
NEXT_SEGMENT = {
    Phase.INTRO: ROUND_A,
    Phase.ROUND_A: ROUND_B,
    Phase.ROUND_B: AD_BREAK,
    Phase.AD: VOTING,
}

# next_round from any phase outside the pipeline resyncs to round A
RESYNC = ROUND_A

# Phases the clock never advances out of
HOLD_PHASES = frozenset({Phase.WAITING, Phase.VOTING, Phase.FINISHED})


def enter(room: RoomState, segment: Segment) -> RoomState:
    room.phase = segment.phase
    room.time_left = segment.seconds
    room.active_player = segment.player
    room.touch()
    return room


def next_segment(phase: Phase) -> Segment:
    """Target of a manual next_round from ``phase``"""
    segment = NEXT_SEGMENT.get(phase)
    if segment is None:
        return RESYNC
    return segment


def reset_state(room: RoomState) -> RoomState:
    """Fresh waiting room that keeps the current audience"""
    return RoomState(viewers_count=room.viewers_count)


def apply_admin_action(room: RoomState, action: str) -> RoomState:
    """
    Apply an operator action and return the room to keep.

    ``reset`` returns a brand new RoomState; callers must store the result.
    Unknown actions leave the room untouched.
    """
    if action == "start":
        return enter(room, INTRO)
    if action == "next_round":
        return enter(room, next_segment(room.phase))
    if action == "reset":
        return reset_state(room)
    logger.warning(f"Ignoring unknown admin action: {action!r}")
    return room


def auto_advance(room: RoomState) -> bool:
    """Move to the next phase once the clock is at zero. Returns True on transition."""
    if room.time_left != 0 or room.phase in HOLD_PHASES:
        return False
    segment = NEXT_SEGMENT.get(room.phase)
    if segment is None:
        return False
    enter(room, segment)
    return True


def tick(room: RoomState) -> bool:
    """One scheduler step for a room. Returns True if anything changed."""
    changed = False
    if room.time_left > 0:
        room.time_left -= 1
        changed = True
    if auto_advance(room):
        changed = True
    if changed:
        room.touch()
    return changed
