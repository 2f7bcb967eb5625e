# --- src/vlab_core/data_structures.py ---
import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

#: Signature of a definition's compute rule: variable key -> value in, output key -> value out.
ComputeFunction = Callable[[Mapping[str, float]], Mapping[str, float]]


@dataclass(frozen=True)
class VariableDescriptor:
    """One bounded scalar input of a simulation."""
    key: str
    label: str
    min: float
    max: float
    default: float
    unit: Optional[str] = None
    step: Optional[float] = None


@dataclass(frozen=True)
class OutputDescriptor:
    """One named scalar result. Outputs carry no range; NaN and +/-inf are legal values."""
    key: str
    label: str
    unit: Optional[str] = None


@dataclass(frozen=True)
class SimulationDefinition:
    """
    Static, immutable description of one simulation: identity, display text, the
    bounded variables with their defaults, the declared outputs and the pure
    `compute` rule mapping a variable assignment to an output assignment.

    `category`, `name`, `description` and `formula` are display/filter text only and
    never influence computation. `variables` and `outputs` are stored as tuples in
    declaration order.
    """
    id: str
    category: str
    name: str
    description: str
    variables: Tuple[VariableDescriptor, ...]
    outputs: Tuple[OutputDescriptor, ...]
    compute: ComputeFunction = field(compare=False)
    formula: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'variables', tuple(self.variables))
        object.__setattr__(self, 'outputs', tuple(self.outputs))

    @property
    def variable_keys(self) -> Tuple[str, ...]:
        return tuple(v.key for v in self.variables)

    @property
    def output_keys(self) -> Tuple[str, ...]:
        return tuple(o.key for o in self.outputs)

    @property
    def search_text(self) -> str:
        """The text the selection service matches queries against."""
        return f"{self.name} {self.category} {self.description}"
