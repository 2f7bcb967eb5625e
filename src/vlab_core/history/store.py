# src/vlab_core/history/store.py
"""
File-backed persistence for experiment histories.

Each history key (`physics_experiments`, `biology_experiments`,
`chemistry_experiments`) is stored as one JSON array of record objects in
`<directory>/<key>.json`, the same encoding the browser client keeps in local storage.
Persistence problems never propagate to the caller: unreadable files load as an empty
history and failed writes are logged.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

logger = logging.getLogger(__name__)


class JsonHistoryStore:
    """Reads and writes JSON-array history files inside one directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()
        logger.debug(f"JsonHistoryStore using directory '{self.directory}'.")

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> List[Dict[str, Any]]:
        """Returns the stored records for `key`, or an empty list if there are none or they are unreadable."""
        path = self.path_for(key)
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read history '{key}' from '{path}': {e}. Starting with an empty history.")
            return []
        if not isinstance(data, list):
            logger.warning(f"History file '{path}' does not contain a JSON array. Starting with an empty history.")
            return []
        return [item for item in data if isinstance(item, dict)]

    def save(self, key: str, records: List[Dict[str, Any]]) -> bool:
        """Replaces the stored records for `key`. Returns False (after logging) if the write failed."""
        path = self.path_for(key)
        try:
            # Encode first so an unserializable record never truncates the existing file.
            content = json.dumps(records, allow_nan=False, indent=2)
            self.directory.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                f.write(content)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write history '{key}' to '{path}': {e}")
            return False
        logger.debug(f"Wrote {len(records)} record(s) to '{path}'.")
        return True

    def clear(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove history file '{path}': {e}")
