"""JSON-file key/value store used as the client's local cache"""

import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

GUEST_CART_KEY = "cart_guest"
GUEST_WISHLIST_KEY = "wishlist_guest"
TOKEN_KEY = "urbansprout_token"
USER_KEY = "urbansprout_user"


def cart_key(email: Optional[str] = None) -> str:
    """Cache key for a user's cart backup, or the guest cart"""
    return f"cart_{email}" if email else GUEST_CART_KEY


def wishlist_key(email: Optional[str] = None) -> str:
    return f"wishlist_{email}" if email else GUEST_WISHLIST_KEY


class LocalCache:
    """
    Persistent key/value cache backed by a single JSON file.

    A missing, unreadable or corrupt file behaves as an empty cache.
    Passing ``path=None`` keeps everything in memory.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._memory: Dict[str, Any] = {}

    def _load(self) -> Dict[str, Any]:
        if self.path is None:
            return self._memory

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable cache file {self.path}: {e}")
            return {}

        return data if isinstance(data, dict) else {}

    def _store(self, data: Dict[str, Any]):
        if self.path is None:
            self._memory = data
            return

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, default=str)
        os.replace(tmp_path, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any):
        data = self._load()
        data[key] = value
        self._store(data)

    def remove(self, key: str):
        data = self._load()
        if key in data:
            del data[key]
            self._store(data)

    def __contains__(self, key: str) -> bool:
        return key in self._load()
