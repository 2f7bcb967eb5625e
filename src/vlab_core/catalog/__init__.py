# src/vlab_core/catalog/__init__.py
import logging
logger = logging.getLogger(__name__)

from .exceptions import CatalogParsingError, CatalogSchemaError
from .raw_data import (
    ParsedVariableData,
    ParsedOutputData,
    ParsedSimulationData,
    ParsedSimulationCatalog,
    ParsedChemicalData,
    ParsedReactionData,
    ParsedChemistryCatalog,
)
from .parser import CatalogParser, ChemistryCatalogParser
from .builder import CatalogBuilder

__all__ = [
    "CatalogParsingError",
    "CatalogSchemaError",
    "ParsedVariableData",
    "ParsedOutputData",
    "ParsedSimulationData",
    "ParsedSimulationCatalog",
    "ParsedChemicalData",
    "ParsedReactionData",
    "ParsedChemistryCatalog",
    "CatalogParser",
    "ChemistryCatalogParser",
    "CatalogBuilder",
]
