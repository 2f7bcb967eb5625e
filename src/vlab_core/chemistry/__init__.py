# src/vlab_core/chemistry/__init__.py
import logging
logger = logging.getLogger(__name__)

from .chemicals import Chemical, Reaction, ChemicalCatalog, load_chemical_catalog, demo_properties
from .mixture import Mixture, MixtureEntry, ReactionContext, build_analysis_request
from .experiment import ChemistryExperiment

__all__ = [
    "Chemical",
    "Reaction",
    "ChemicalCatalog",
    "load_chemical_catalog",
    "demo_properties",
    "Mixture",
    "MixtureEntry",
    "ReactionContext",
    "build_analysis_request",
    "ChemistryExperiment",
]
