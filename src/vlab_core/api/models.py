# src/vlab_core/api/models.py
"""Request and response models of the Virtual Lab HTTP API."""
import math
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from ..data_structures import SimulationDefinition
from ..presentation import format_value


class HealthResponse(BaseModel):
    status: str
    model: str
    hasKey: bool


class EvaluateRequest(BaseModel):
    """Variable overrides; keys left out keep their defaults."""
    variables: Dict[str, float] = Field(default_factory=dict)


class SimulationSnapshotRequest(BaseModel):
    simulationId: str
    variables: Dict[str, float] = Field(default_factory=dict)
    score: Optional[int] = None


class ChemistryExperimentRequest(BaseModel):
    chemicals: List[str]
    temperature: float = 25.0
    ph: float = 7.0
    result: str
    score: int = 50


class MixtureItem(BaseModel):
    id: int
    volume: float = Field(default=10.0, gt=0)


class MixtureRequest(BaseModel):
    items: List[MixtureItem]
    temperatureC: Optional[float] = None
    heating: Optional[bool] = None
    notes: Optional[str] = None


def finite_or_none(value: float) -> Optional[float]:
    """JSON cannot carry NaN or infinities; they are sent as null."""
    value = float(value)
    return value if math.isfinite(value) else None


def encode_numbers(values: Mapping[str, float]) -> Dict[str, Optional[float]]:
    return {key: finite_or_none(value) for key, value in values.items()}


def simulation_summary(definition: SimulationDefinition) -> Dict[str, Any]:
    return {
        "id": definition.id,
        "name": definition.name,
        "category": definition.category,
        "description": definition.description,
    }


def simulation_detail(definition: SimulationDefinition) -> Dict[str, Any]:
    detail = simulation_summary(definition)
    detail["formula"] = definition.formula
    detail["variables"] = [
        {
            "key": v.key, "label": v.label, "unit": v.unit,
            "min": v.min, "max": v.max, "default": v.default, "step": v.step,
        }
        for v in definition.variables
    ]
    detail["outputs"] = [{"key": o.key, "label": o.label, "unit": o.unit} for o in definition.outputs]
    return detail


def evaluation_payload(variables: Mapping[str, float], outputs: Mapping[str, float]) -> Dict[str, Any]:
    return {
        "variables": encode_numbers(variables),
        "outputs": encode_numbers(outputs),
        "display": {key: format_value(value) for key, value in outputs.items()},
    }
