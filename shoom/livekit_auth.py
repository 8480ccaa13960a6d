"""
LiveKit JWT token generation
"""
import os
import time
from typing import Optional

import jwt

from .config import env_flag

# Environment variables for LiveKit configuration
LIVEKIT_URL = os.environ.get("LIVEKIT_WS_URL", "")
LIVEKIT_API_KEY = os.environ.get("LIVEKIT_API_KEY", "")
LIVEKIT_API_SECRET = os.environ.get("LIVEKIT_API_SECRET", "")
LIVEKIT_TOKEN_TTL = int(os.environ.get("LIVEKIT_TOKEN_TTL", 60 * 60))

# Only debaters get to publish audio/video; everyone else watches
PUBLISHER_ROLE = "debater"


class LiveKitError(Exception):
    """Base class for credential failures"""


class LiveKitNotConfigured(LiveKitError):
    """API key or secret missing from the environment"""


class TokenMintError(LiveKitError):
    """Signing the access token failed"""


def mint_livekit_token(identity: str, room: str, role: Optional[str] = None,
                       name: Optional[str] = None,
                       api_key: Optional[str] = None,
                       api_secret: Optional[str] = None) -> str:
    """
    Mint a LiveKit access token for a participant

    Args:
        identity: Unique participant identifier
        room: Room name/ID
        role: 'debater' may publish, any other role is subscribe-only
        name: Display name (optional)
        api_key, api_secret: override the environment credentials

    Returns:
        JWT token string

    Raises:
        LiveKitNotConfigured: credentials are absent
        TokenMintError: the token could not be signed
    """
    api_key = LIVEKIT_API_KEY if api_key is None else api_key
    api_secret = LIVEKIT_API_SECRET if api_secret is None else api_secret
    if not api_key or not api_secret:
        raise LiveKitNotConfigured("LIVEKIT_API_KEY / LIVEKIT_API_SECRET not set")

    now = int(time.time())

    grants = {
        "room": room,
        "roomJoin": True,
        "canPublish": role == PUBLISHER_ROLE,
        "canPublishData": True,
        "canSubscribe": True
    }

    payload = {
        "iss": api_key,
        "sub": identity,
        "name": name or identity,
        "nbf": now - 5,  # Not before (with 5s clock skew tolerance)
        "exp": now + LIVEKIT_TOKEN_TTL,
        "video": grants
    }

    try:
        return jwt.encode(payload, api_secret, algorithm="HS256")
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise TokenMintError(str(e)) from e


def livekit_ws_url(host: str) -> str:
    """Public LiveKit URL, explicit LIVEKIT_WS_URL wins over the derived one"""
    if LIVEKIT_URL:
        return LIVEKIT_URL
    livekit_port = ":" + str(os.environ.get('LIVEKIT_PORT', '7880'))
    livekit_secure = env_flag('LIVEKIT_SECURE', False)
    livekit_protocol = "wss" if livekit_secure else "ws"
    return f"{livekit_protocol}://{host}{'/livekit' if livekit_secure else livekit_port}"
