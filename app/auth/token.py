"""JWT-shaped session tokens.

Tokens are three base64 segments (header, payload, placeholder signature).
Nothing is signed or verified: validity only means the payload decodes and
its ``exp`` lies in the future.
"""
import base64
import json
import time
from typing import Optional

from app.user.models import User
from ..core.errors import TokenDecodeError

TOKEN_TTL_SECONDS = 24 * 60 * 60


def _encode(data: str) -> str:
    return base64.b64encode(data.encode("utf-8")).decode("ascii")


def generate_token(user: User, ttl_seconds: int = TOKEN_TTL_SECONDS, now: Optional[float] = None) -> str:
    issued_at = int(now if now is not None else time.time())
    header = _encode(json.dumps({"alg": "HS256", "typ": "JWT"}))
    payload = _encode(json.dumps({
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "iat": issued_at,
        "exp": issued_at + ttl_seconds
    }))
    signature = _encode("fake-signature")
    return f"{header}.{payload}.{signature}"


def decode_payload(token: str) -> dict:
    try:
        segment = token.split(".")[1]
        payload = json.loads(base64.b64decode(segment, validate=True).decode("utf-8"))
    except (AttributeError, IndexError, ValueError) as e:
        raise TokenDecodeError(f"Malformed token: {str(e)}") from e
    if not isinstance(payload, dict) or not isinstance(payload.get("exp"), (int, float)):
        raise TokenDecodeError("Token payload has no expiry")
    return payload


def is_valid_token(token: Optional[str], now: Optional[float] = None) -> bool:
    if not token:
        return False
    try:
        payload = decode_payload(token)
    except TokenDecodeError:
        return False
    return payload["exp"] > (now if now is not None else time.time())
