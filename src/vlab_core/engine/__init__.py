# src/vlab_core/engine/__init__.py
import logging
logger = logging.getLogger(__name__)

from .exceptions import EngineError, UnknownVariableKey, NoActiveSimulationError
from .assignment import VariableAssignment
from .engine import EvaluationEngine
from .session import SimulationSession

__all__ = [
    "EngineError",
    "UnknownVariableKey",
    "NoActiveSimulationError",
    "VariableAssignment",
    "EvaluationEngine",
    "SimulationSession",
]
