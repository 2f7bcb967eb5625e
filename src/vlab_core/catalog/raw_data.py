# src/vlab_core/catalog/raw_data.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

# Intermediate representation produced by the catalog parsers and consumed by the
# registry builder and the chemistry catalog. Frozen dataclasses keep raw YAML
# dictionaries from leaking past the parsing stage.

@dataclass(frozen=True)
class ParsedVariableData:
    key: str
    label: str
    min: float
    max: float
    default: float
    unit: Optional[str] = None
    step: Optional[float] = None

@dataclass(frozen=True)
class ParsedOutputData:
    key: str
    label: str
    expression: Union[str, float]
    unit: Optional[str] = None

@dataclass(frozen=True)
class ParsedSimulationData:
    """IR for one catalog entry; its outputs still hold uncompiled expressions."""
    simulation_id: str
    category: str
    name: str
    description: str
    variables: List[ParsedVariableData]
    outputs: List[ParsedOutputData]
    formula: Optional[str] = None

@dataclass(frozen=True)
class ParsedSimulationCatalog:
    """Top-level IR node for one simulation catalog file (one lab)."""
    lab: str
    source_yaml_path: Path
    simulations: List[ParsedSimulationData]
    constants: Dict[str, float] = field(default_factory=dict)

@dataclass(frozen=True)
class ParsedChemicalData:
    chemical_id: int
    name: str
    formula: str
    description: str

@dataclass(frozen=True)
class ParsedReactionData:
    reactants: Tuple[int, int]
    description: str
    products: List[int]

@dataclass(frozen=True)
class ParsedChemistryCatalog:
    """Top-level IR node for the chemistry catalog file."""
    source_yaml_path: Path
    chemicals: List[ParsedChemicalData]
    reactions: List[ParsedReactionData]
    default_reaction: str
