# src/vlab_core/history/recorder.py
import logging
from collections import deque
from typing import Deque, Generic, Optional, Protocol, Tuple, Type, TypeVar

from ..constants import HISTORY_CAPACITY
from .snapshot import Snapshot
from .store import JsonHistoryStore

logger = logging.getLogger(__name__)


class HistoryEntry(Protocol):
    """Anything the recorder can persist: it converts to and from a JSON-compatible record."""
    def to_record(self) -> dict: ...

    @classmethod
    def from_record(cls, record: dict) -> 'HistoryEntry': ...


EntryT = TypeVar('EntryT', bound=HistoryEntry)


class HistoryRecorder(Generic[EntryT]):
    """
    Fixed-capacity, most-recent-first history of experiment entries.

    Recording the (capacity + 1)-th entry evicts the oldest one; eviction is purely by
    insertion order. When a store and key are attached, the recorder loads the stored
    entries on construction and rewrites the whole list after every change. Store
    failures are logged by the store and never reach the caller.
    """

    def __init__(
        self,
        capacity: int = HISTORY_CAPACITY,
        store: Optional[JsonHistoryStore] = None,
        key: Optional[str] = None,
        entry_type: Type[EntryT] = Snapshot,
    ):
        if capacity < 1:
            raise ValueError(f"History capacity must be at least 1, got {capacity}.")
        if store is not None and not key:
            raise ValueError("A history key is required when a store is attached.")
        self.capacity = capacity
        self.store = store
        self.key = key
        self.entry_type = entry_type
        # Index 0 is the most recent entry.
        self._entries: Deque[EntryT] = deque(maxlen=capacity)
        if self.store is not None:
            self._load()

    def _load(self):
        loaded = []
        for record in self.store.load(self.key)[:self.capacity]:
            try:
                loaded.append(self.entry_type.from_record(record))
            except ValueError as e:
                logger.warning(f"Skipping malformed record in history '{self.key}': {e}")
        self._entries.extend(loaded)
        logger.info(f"Loaded {len(self._entries)} entr(y/ies) for history '{self.key}'.")

    def _persist(self):
        if self.store is not None:
            self.store.save(self.key, [entry.to_record() for entry in self._entries])

    def record(self, entry: EntryT) -> None:
        """Prepends `entry`, evicting the oldest entry if the capacity is exceeded."""
        if len(self._entries) == self.capacity:
            logger.debug(f"History '{self.key}' at capacity ({self.capacity}); evicting oldest entry.")
        self._entries.appendleft(entry)
        self._persist()

    def list(self) -> Tuple[EntryT, ...]:
        """All retained entries, most recent first."""
        return tuple(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self._persist()

    def __len__(self) -> int:
        return len(self._entries)
