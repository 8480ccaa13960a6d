"""
Room state entities for the debate show
"""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

# Most recent chat messages kept per room
CHAT_HISTORY_LIMIT = 50


class Phase(str, Enum):
    WAITING = "waiting"
    INTRO = "intro"
    ROUND_A = "roundA"
    ROUND_B = "roundB"
    AD = "ad"
    VOTING = "voting"
    # Declared for the show format but not produced by any transition yet
    RAGE = "rage"
    FINISHED = "finished"


class Player(str, Enum):
    A = "A"
    B = "B"


@dataclass
class ChatMessage:
    id: str
    user: str
    text: str
    is_donation: bool = False
    amount: float = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user": self.user,
            "text": self.text,
            "isDonation": self.is_donation,
            "amount": self.amount,
        }


@dataclass
class Donation:
    user: str
    amount: float

    def to_dict(self) -> dict:
        return {"user": self.user, "amount": self.amount}


@dataclass
class RoomState:
    """One room's show: phase clock, active speaker, audience and chat"""

    phase: Phase = Phase.WAITING
    time_left: int = 0
    active_player: Optional[Player] = None
    viewers_count: int = 0
    chat_messages: List[ChatMessage] = field(default_factory=list)
    donations: List[Donation] = field(default_factory=list)
    # Not part of the snapshot; monotonic time of the last change
    last_activity: float = field(default_factory=time.monotonic)

    def touch(self) -> None:
        self.last_activity = time.monotonic()

    def add_viewer(self) -> int:
        self.viewers_count += 1
        self.touch()
        return self.viewers_count

    def remove_viewer(self) -> int:
        """Drop one viewer; never goes below zero on duplicate disconnects"""
        if self.viewers_count > 0:
            self.viewers_count -= 1
        self.touch()
        return self.viewers_count

    def to_snapshot(self) -> Dict:
        """Full wire representation sent as ``state_update``"""
        return {
            "phase": self.phase.value,
            "timeLeft": self.time_left,
            "activePlayer": self.active_player.value if self.active_player else None,
            "viewersCount": self.viewers_count,
            "chatMessages": [m.to_dict() for m in self.chat_messages],
            "donations": [d.to_dict() for d in self.donations],
        }
