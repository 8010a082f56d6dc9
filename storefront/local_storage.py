"""
Local storage for the storefront client

A small string key/value store with the same contract as a browser's
``localStorage``. Values are strings; callers that keep objects serialise
them to JSON themselves. When a path is given the store is persisted to a
JSON file after every write, otherwise it lives in memory only.
"""

import json
import logging
import os
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# Storage keys
AUTH_USER_KEY = "auth_user"
USER_LICENSE_KEY = "user_license"
LICENSE_TOKEN_KEY = "license_token"
ACTIVATED_LICENSE_KEY = "activated_license"
PAYMENT_REF_KEY = "paymentRef"
PURCHASE_DATA_KEY = "purchaseData"
SELECTED_ADD_ONS_KEY = "selectedAddOns"


class LocalStorage:
    """String key/value store, optionally backed by a JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = os.path.expanduser(path) if path else None
        self._items: Dict[str, str] = {}
        self._load()

    def _load(self):
        if not self.path or not os.path.exists(self.path):
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return
        if isinstance(data, dict):
            self._items = {str(k): str(v) for k, v in data.items()}

    def _save(self):
        if not self.path:
            return
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(self._items, f, indent=2)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._save()

    def remove_item(self, key: str) -> None:
        if key in self._items:
            del self._items[key]
            self._save()

    def clear(self) -> None:
        self._items = {}
        self._save()

    def get_json(self, key: str):
        """Return the parsed JSON value under *key*, or ``None``."""
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Stored value for {key} is not valid JSON")
            return None

    def set_json(self, key: str, value) -> None:
        self.set_item(key, json.dumps(value))

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
