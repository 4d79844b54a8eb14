"""Best-effort key-value persistence in a JSON file."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

LOGGER = logging.getLogger(__name__)


class KeyValueStore:
    """Stores JSON-compatible values by key.

    Every change is written through to disk. Read and write failures are
    logged and otherwise ignored.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._data: Dict[str, Any] = {}
        self.reload()

    def reload(self) -> None:
        if not self.path.is_file():
            self._data = {}
            return
        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
            self._data = data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, OSError) as e:
            LOGGER.warning("Failed to read state file %s: %s", self.path, e)
            self._data = {}

    def load(self, key: str, default: Optional[Any] = None) -> Any:
        return self._data.get(key, default)

    def save(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def save_many(self, values: Dict[str, Any]) -> None:
        """Save several keys with a single write."""
        self._data.update(values)
        self._flush()

    def delete(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()

    def clear(self) -> None:
        self._data = {}
        self._flush()

    def _flush(self) -> None:
        tmp_path = self.path.with_name(self.path.name + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            LOGGER.warning("Failed to write state file %s: %s", self.path, e)
