# src/vlab_core/history/__init__.py
import logging
logger = logging.getLogger(__name__)

from .snapshot import Snapshot
from .store import JsonHistoryStore
from .recorder import HistoryRecorder, HistoryEntry

__all__ = [
    "Snapshot",
    "JsonHistoryStore",
    "HistoryRecorder",
    "HistoryEntry",
]
