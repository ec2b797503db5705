"""
Local key-value storage backends for persisted application state.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class StorageProtocol(Protocol):
    """String values under fixed string keys, like a browser's localStorage."""

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if nothing is stored."""

    def set_item(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""

    def remove_item(self, key: str) -> None:
        """Delete a key if present."""


class FileStorage:
    """
    Stores each key as a file inside a data directory.

    Files are created with owner-only permissions and replaced whole,
    so a failed write leaves the previous value in place.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory).expanduser()

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as file_handle:
                return file_handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return None

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        temp_path = path.with_name(f"{path.name}.tmp")
        self.directory.mkdir(parents=True, exist_ok=True)
        try:
            with open(temp_path, "w", encoding="utf-8") as file_handle:
                file_handle.write(value)
            temp_path.chmod(0o600)
            # The previous payload stays intact until the new one is complete
            os.replace(temp_path, path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            path.unlink()


class InMemoryStorage:
    """Volatile storage, for tests and dry runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)
