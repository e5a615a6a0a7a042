"""
Local key/value storage backed by a single JSON file.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Union

from .constants import STORAGE_FILE

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the storage file cannot be written."""


class JsonFileStorage:
    """
    String key -> string value store persisted as one JSON object.

    Every write rewrites the whole file atomically (temp file + os.replace).
    A missing or unreadable file behaves like an empty store.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or STORAGE_FILE)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read storage file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: top level is not an object", self.path)
            return {}
        return data

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str):
        """Store ``value`` under ``key``. Raises StorageError if the file cannot be written."""
        data = self._read_all()
        data[key] = value

        # Atomic write: write to temp file first, then rename
        temp_file = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(temp_file, self.path)
        except OSError as e:
            # Clean up temp file if it exists
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError:
                    pass
            raise StorageError(f"Failed to write {self.path}: {e}") from e

