"""Local durable storage for the client cart (localStorage-style key/value)."""
import json
import os
import tempfile
from typing import Dict, Optional

from core.logging import get_logger

logger = get_logger(__name__)

CART_STORAGE_KEY = "guest_cart"
CART_STORAGE_PATH = os.environ.get("CART_STORAGE_PATH", "/tmp/cart_local_storage.json")


class MemoryStorage:
    """In-process string store with the same interface as FileStorage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage:
    """
    String key/value store persisted as a JSON object in a single file.

    Writes go through a temp file and ``os.replace`` so a crash never leaves a
    half-written file behind. An unreadable file is treated as empty.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or CART_STORAGE_PATH

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Unreadable local storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Local storage file {self.path} is not a JSON object, ignoring")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".storage-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
