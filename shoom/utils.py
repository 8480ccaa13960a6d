"""
Utility functions for ID generation and display names
"""
import random
import string
import time

_BASE36 = string.digits + string.ascii_lowercase


def generate_message_id(length: int = 11) -> str:
    """Millisecond timestamp followed by a random base36 suffix"""
    suffix = "".join(random.choice(_BASE36) for _ in range(length))
    return str(int(time.time() * 1000)) + suffix


def room_title(room_id: str) -> str:
    """Human-readable room title, e.g. 'cats-vs-dogs' -> 'CATS VS DOGS'"""
    return room_id.replace("-", " ").upper()
