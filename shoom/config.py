"""
Environment-driven settings for the Shoom backend
"""
import logging
import os
from typing import Optional

logger = logging.getLogger("shoom")


def env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


PORT = int(os.environ.get("PORT", 3001))
SERVER_HOST = os.environ.get("SERVER_HOST", "0.0.0.0")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

TICK_INTERVAL = _env_float("SHOOM_TICK_INTERVAL", 1.0)
# 0 disables idle room expiry
ROOM_IDLE_TTL = _env_float("SHOOM_ROOM_IDLE_TTL", 0.0)

SOFT_CORS = env_flag("SHOOM_SOFT_CORS", True)

DEFAULT_ORIGINS = (
    "http://localhost:3000",
    "https://shoom.fun",
    "http://shoom.fun",
)


def allowed_origins() -> list:
    """Whitelisted frontend origins, including FRONTEND_URL when set"""
    origins = list(DEFAULT_ORIGINS)
    frontend_url = os.environ.get("FRONTEND_URL")
    if frontend_url and frontend_url not in origins:
        origins.append(frontend_url)
    return origins


class OriginPolicy:
    """
    Decides whether a browser origin may talk to the server.

    With soft mode on, unlisted origins are still let through but logged,
    which is how the production frontend has been deployed so far.
    """

    def __init__(self, origins: Optional[list] = None, soft: bool = SOFT_CORS):
        self.origins = list(origins) if origins is not None else allowed_origins()
        self.soft = soft

    def is_allowed(self, origin: Optional[str]) -> bool:
        # Server-to-server calls and curl carry no Origin header
        if not origin:
            return True
        if origin in self.origins:
            return True
        if self.soft:
            logger.warning(f"⚠️ Unlisted origin let through (soft CORS): {origin}")
            return True
        logger.warning(f"⛔ Blocked CORS request from: {origin}")
        return False

    def socketio_origins(self):
        """Value for python-socketio's cors_allowed_origins"""
        if self.soft:
            return "*"
        return self.origins
