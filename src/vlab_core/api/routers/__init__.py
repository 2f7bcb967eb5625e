# src/vlab_core/api/routers/__init__.py
import logging
logger = logging.getLogger(__name__)

from .health import setup_health_router
from .gemini import setup_gemini_router
from .labs import setup_labs_router
from .chemistry import setup_chemistry_router
from .history import setup_history_router

__all__ = [
    "setup_health_router",
    "setup_gemini_router",
    "setup_labs_router",
    "setup_chemistry_router",
    "setup_history_router",
]
