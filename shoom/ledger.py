"""
Chat and donation ledger for a room
"""
import logging
import math
from typing import Any, Optional

from .models import CHAT_HISTORY_LIMIT, ChatMessage, Donation, RoomState
from .utils import generate_message_id

logger = logging.getLogger("shoom")


def parse_amount(raw: Any) -> float:
    """
    Donation amount from client payload.

    Anything that is not a finite, non-negative number counts as 0 so the
    value always serializes as plain JSON.
    """
    if isinstance(raw, bool) or raw is None:
        return 0
    if isinstance(raw, (int, float)):
        value = raw
    else:
        try:
            value = float(raw)
        except (TypeError, ValueError):
            return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if value < 0:
        return 0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def parse_flag(raw: Any) -> bool:
    """Only a real JSON ``true`` marks a donation"""
    return raw is True


def build_message(user: str, text: str, is_donation: bool = False,
                  amount: Optional[Any] = None) -> ChatMessage:
    is_donation = parse_flag(is_donation)
    return ChatMessage(
        id=generate_message_id(),
        user=user,
        text=text,
        is_donation=is_donation,
        amount=parse_amount(amount) if is_donation else 0,
    )


def append(room: RoomState, message: ChatMessage) -> ChatMessage:
    """
    Record a message in the room.

    Donations are also added to the donation list. Chat history is then
    trimmed to the newest CHAT_HISTORY_LIMIT entries, oldest first out.
    """
    room.chat_messages.append(message)
    if message.is_donation:
        room.donations.append(Donation(user=message.user, amount=message.amount))
        logger.info(f"💸 Donation from {message.user}: {message.amount}")
    if len(room.chat_messages) > CHAT_HISTORY_LIMIT:
        del room.chat_messages[:-CHAT_HISTORY_LIMIT]
    room.touch()
    return message
