"""
Device-bound licence activation used during account registration
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from config import settings
from device_fingerprint import generate_device_fingerprint
from http_client import NETWORK_ERRORS, is_ok, post_json
from local_storage import LocalStorage, ACTIVATED_LICENSE_KEY
from token_codec import format_timestamp

logger = logging.getLogger(__name__)

MIN_LICENSE_KEY_LENGTH = 3


def is_valid_license_key(licence_key: Optional[str]) -> bool:
    """Basic format check: at least three characters once trimmed."""
    if not licence_key or not licence_key.strip():
        return False
    return len(licence_key.strip()) >= MIN_LICENSE_KEY_LENGTH


class LicenseService:
    """Activates a licence for this device and remembers the result."""

    def __init__(self, storage: LocalStorage, licence_api_url: Optional[str] = None):
        self.storage = storage
        self.licence_api_url = (licence_api_url or settings.licence_api_url).rstrip("/")

    async def activate_license(self, email: str, licence_key: str) -> Dict[str, Any]:
        """
        Returns ``{"success": True, "message": ..., "data": ...}`` or
        ``{"success": False, "error": ...}``.
        """
        payload = {
            "email": email,
            "licenceKey": licence_key,
            "deviceFingerprint": generate_device_fingerprint(),
        }
        try:
            status, data = await post_json(f"{self.licence_api_url}/api/v0/licence/activate", payload)
        except NETWORK_ERRORS as e:
            logger.error(f"License activation error: {e}")
            return {
                "success": False,
                "error": "Network error. Please check your connection and try again.",
            }

        if is_ok(status):
            return {
                "success": True,
                "message": "License activated successfully",
                "data": data,
            }
        return {
            "success": False,
            "error": data.get("message") or data.get("error") or "License activation failed",
        }

    def store_license_info(self, license_data: Dict[str, Any]) -> None:
        record = dict(license_data)
        record["activatedAt"] = format_timestamp(datetime.now(timezone.utc))
        self.storage.set_json(ACTIVATED_LICENSE_KEY, record)

    def get_stored_license_info(self) -> Optional[Dict[str, Any]]:
        return self.storage.get_json(ACTIVATED_LICENSE_KEY)
