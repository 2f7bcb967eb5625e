# src/vlab_core/labs.py
"""
Entry points that turn the packaged lab catalogs into ready-to-use registries.

The physics and biology labs are simulation catalogs; the chemistry lab is a reagent
shelf and is loaded through `vlab_core.chemistry.load_chemical_catalog` instead.
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Tuple, Union

from .catalog import CatalogBuilder
from .registry import SimulationRegistry

logger = logging.getLogger(__name__)

CATALOG_DIR = Path(__file__).parent / "catalog" / "data"

#: Labs whose content is a simulation catalog.
SIMULATION_LABS: Tuple[str, ...] = ("physics", "biology")
#: Every lab, in the order the client presents them.
LABS: Tuple[str, ...] = ("chemistry", "physics", "biology")


def catalog_path(lab: str) -> Path:
    """Path of the packaged catalog file for `lab`."""
    if lab not in LABS:
        raise ValueError(f"Unknown lab '{lab}'. Known labs: {', '.join(LABS)}")
    return CATALOG_DIR / f"{lab}.yaml"


def load_catalog_registry(yaml_path: Union[str, Path]) -> SimulationRegistry:
    """
    Builds a registry from any simulation catalog file.

    Raises:
        ConfigurationError: if the file cannot be read, fails the schema, contains a bad
            formula or yields definitions that fail validation.
    """
    return CatalogBuilder().build_from_file(yaml_path)


@lru_cache(maxsize=None)
def load_lab_registry(lab: str) -> SimulationRegistry:
    """
    Returns the registry of a packaged simulation lab ("physics" or "biology").
    Registries are immutable, so each lab is built once per process.
    """
    if lab not in SIMULATION_LABS:
        raise ValueError(f"Lab '{lab}' has no simulation catalog. Simulation labs: {', '.join(SIMULATION_LABS)}")
    registry = load_catalog_registry(catalog_path(lab))
    logger.info(f"Lab '{lab}' loaded with {len(registry)} simulation(s).")
    return registry
