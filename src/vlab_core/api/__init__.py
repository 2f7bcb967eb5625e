# src/vlab_core/api/__init__.py
import logging
logger = logging.getLogger(__name__)

from .context import AppContext
from .app import create_app

__all__ = [
    "AppContext",
    "create_app",
]
