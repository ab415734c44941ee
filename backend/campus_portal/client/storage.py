"""
Key/value session storage for the client auth store.

Kept in memory, and mirrored to a JSON file when ``path`` is given so a
session survives restarts.
"""
import json
import os
import logging
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class SessionStorage:
    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._items: Dict[str, str] = {}
        self._load()

    def _load(self):
        if not self.path or not self.path.exists():
            return
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load session from {self.path}: {e}")
            return
        if isinstance(data, dict):
            self._items = {str(k): str(v) for k, v in data.items()}

    def _save(self):
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._items, f, indent=2)
        os.chmod(self.path, 0o600)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self._items[key] = value
        self._save()

    def remove_item(self, key: str):
        if self._items.pop(key, None) is not None:
            self._save()

    def clear(self):
        self._items = {}
        if self.path and self.path.exists():
            self.path.unlink()

    def __contains__(self, key: str) -> bool:
        return key in self._items
