# src/vlab_core/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.info("Virtual Lab core package initialized.")

from .units import ureg, pint, Quantity, parse_display_unit
from .constants import EPSILON, ALL_CATEGORIES, HISTORY_CAPACITY, LAB_HISTORY_KEYS
from .data_structures import SimulationDefinition, VariableDescriptor, OutputDescriptor
from .registry import SimulationRegistry
from .selection import SimulationQuery, filter_definitions
from .engine import EvaluationEngine, SimulationSession, VariableAssignment, UnknownVariableKey, NoActiveSimulationError
from .history import Snapshot, HistoryRecorder, JsonHistoryStore
from .catalog import CatalogBuilder, CatalogParser
from .labs import LABS, load_lab_registry, load_catalog_registry
from .presentation import format_value, clamp_to_range, snap_to_step
from .config import AppSettings, SettingsError
from .errors import VirtualLabError, ConfigurationError

__all__ = [
    # Units
    "ureg", "pint", "Quantity", "parse_display_unit",
    # Constants
    "EPSILON", "ALL_CATEGORIES", "HISTORY_CAPACITY", "LAB_HISTORY_KEYS",
    # Data Structures
    "SimulationDefinition", "VariableDescriptor", "OutputDescriptor",
    # Registry & Selection
    "SimulationRegistry", "SimulationQuery", "filter_definitions",
    # Engine
    "EvaluationEngine", "SimulationSession", "VariableAssignment",
    # History
    "Snapshot", "HistoryRecorder", "JsonHistoryStore",
    # Catalogs
    "CatalogBuilder", "CatalogParser", "LABS", "load_lab_registry", "load_catalog_registry",
    # Presentation
    "format_value", "clamp_to_range", "snap_to_step",
    # Configuration
    "AppSettings", "SettingsError",
    # Top-Level Errors (Actionable Diagnostics)
    "VirtualLabError", "ConfigurationError", "UnknownVariableKey", "NoActiveSimulationError",
]
