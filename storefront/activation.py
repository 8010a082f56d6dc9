"""
Licence activation

Shared licence vocabulary (feature set, licence type, magic keys) and the
token-flow activation client. The licence API mock answers with the same
dispatch the client falls back to when the host is unreachable.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from config import settings
from http_client import NETWORK_ERRORS, is_ok, post_json
from token_codec import encode_token, format_timestamp

logger = logging.getLogger(__name__)

DEFAULT_FEATURES = ["premium-features", "cloud-backup", "priority-support"]
LICENSE_TYPE = "Pro License"
LICENSE_DURATION_DAYS = 365

# Keys that always fail activation
ACTIVATION_ERRORS: Dict[str, str] = {
    "INVALID": "Invalid license key",
    "EXPIRED": "License key has expired",
    "LIMIT": "Activation limit reached for this license",
}


def check_license_key(license_key: str) -> Optional[str]:
    """Return the activation error for a magic key, ``None`` if it activates."""
    return ACTIVATION_ERRORS.get(license_key)


def build_token_payload(email: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    return {
        "email": email,
        "features": list(DEFAULT_FEATURES),
        "licenseType": LICENSE_TYPE,
        "activatedAt": format_timestamp(now),
        "expiration": format_timestamp(now + timedelta(days=LICENSE_DURATION_DAYS)),
    }


def build_license_record(email: str, license_key: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    return {
        "email": email,
        "licenseKey": license_key,
        "features": list(DEFAULT_FEATURES),
        "activatedAt": format_timestamp(now),
        "expiresAt": format_timestamp(now + timedelta(days=LICENSE_DURATION_DAYS)),
    }


def simulate_activation(email: str, license_key: str) -> Dict[str, Any]:
    """Activation result for *license_key* without contacting any host."""
    error = check_license_key(license_key)
    if error:
        return {"success": False, "error": error}
    return {"success": True, "token": encode_token(build_token_payload(email))}


class ActivationClient:
    """
    Activates licence keys against the licence host and returns a token.

    When the host cannot be reached the result is simulated locally after an
    artificial delay.
    """

    def __init__(self, base_url: Optional[str] = None, delay: Optional[float] = None):
        self.base_url = (base_url or settings.auth_api_base_url).rstrip("/")
        self.delay = settings.activation_delay if delay is None else delay

    async def activate(self, email: str, license_key: str) -> Dict[str, Any]:
        """
        Returns a dict with ``"success"`` and either ``"token"`` or ``"error"``.
        """
        try:
            status, data = await post_json(
                f"{self.base_url}/licence/activate",
                {"email": email, "licenceKey": license_key}
            )
        except NETWORK_ERRORS as e:
            logger.warning(f"Licence host unreachable, simulating activation: {e}")
            return await self.simulate(email, license_key)

        if is_ok(status) and data.get("token"):
            return {"success": True, "token": data["token"]}
        return {"success": False, "error": data.get("message") or "Activation failed"}

    async def simulate(self, email: str, license_key: str) -> Dict[str, Any]:
        if self.delay:
            await asyncio.sleep(self.delay)
        return simulate_activation(email, license_key)
