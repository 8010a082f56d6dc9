"""
Licence token codec

Tokens look like JWTs: ``header.payload.signature``. Only the payload is
read -- it is base64 JSON describing the licence (email, features,
licenseType, activatedAt and an optional expiration). The header and the
signature are never checked, so any third segment is accepted.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# base64 of {"alg":"HS256","typ":"JWT"}
MOCK_HEADER = "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9"
MOCK_SIGNATURE = "mock_signature"


def _invalid() -> Dict[str, Any]:
    return {"payload": {}, "is_valid": False, "is_expired": False}


def _b64decode(segment: str) -> bytes:
    """Decode standard or URL-safe base64, padded or not."""
    normalised = segment.replace("-", "+").replace("_", "/")
    normalised += "=" * (-len(normalised) % 4)
    return base64.b64decode(normalised, validate=True)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an ISO-8601 string (``Z`` suffix allowed) or epoch seconds into an
    aware UTC datetime. Raises ``ValueError`` for anything else.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    raise ValueError(f"Not a timestamp: {value!r}")


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def encode_token(payload: Dict[str, Any], signature: str = MOCK_SIGNATURE) -> str:
    """Serialise *payload* into an unsigned ``header.payload.signature`` token."""
    body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return f"{MOCK_HEADER}.{base64.b64encode(body).decode('ascii')}.{signature}"


def decode_token(token: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Decode a licence token.

    Returns a dict with ``"payload"`` (dict), ``"is_valid"`` and
    ``"is_expired"``. A malformed token is never partially trusted: it comes
    back with an empty payload, ``is_valid=False`` and ``is_expired=False``.
    """
    if not isinstance(token, str):
        return _invalid()

    parts = token.split(".")
    if len(parts) != 3:
        logger.debug(f"Token has {len(parts)} parts instead of 3")
        return _invalid()

    try:
        payload = json.loads(_b64decode(parts[1]).decode("utf-8"))
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Token payload could not be decoded: {e}")
        return _invalid()

    if not isinstance(payload, dict):
        return _invalid()

    is_expired = False
    expiration = payload.get("expiration")
    if expiration:
        try:
            expires_at = parse_timestamp(expiration)
        except (ValueError, TypeError, OverflowError, OSError):
            logger.debug("Token expiration is malformed")
            return _invalid()
        current = now or datetime.now(timezone.utc)
        is_expired = current > expires_at

    return {"payload": payload, "is_valid": True, "is_expired": is_expired}
