# src/vlab_core/engine/engine.py
import logging
from typing import Any, Mapping

from ..data_structures import SimulationDefinition
from .assignment import VariableAssignment

logger = logging.getLogger(__name__)


class EvaluationEngine:
    """
    Stateless evaluation procedure shared by every lab.

    The engine neither clamps variable values to their [min, max] range nor inspects
    outputs: out-of-range inputs flow through to `compute`, and NaN or infinite results
    are returned exactly as the compute rule produced them. Range clamping and the
    rendering of non-finite values belong to the presentation layer.
    """

    def initial_assignment(self, definition: SimulationDefinition) -> VariableAssignment:
        """Maps every declared variable key to exactly its default, and nothing else."""
        return VariableAssignment(
            {variable.key: variable.default for variable in definition.variables},
            simulation_id=definition.id,
        )

    def set_variable(self, assignment: VariableAssignment, key: str, value: Any) -> VariableAssignment:
        """
        Returns a new assignment with `key` set to `value`; the input assignment is unchanged.

        Raises:
            UnknownVariableKey: if `key` is not declared by the assignment's definition.
        """
        return assignment.replace(key, value)

    def evaluate(self, definition: SimulationDefinition, assignment: Mapping[str, float]) -> Mapping[str, float]:
        """Invokes the definition's compute rule and returns its result verbatim."""
        return definition.compute(assignment)

    def reset(self, definition: SimulationDefinition) -> VariableAssignment:
        """Named "Reset" action; identical to `initial_assignment`."""
        logger.debug(f"Resetting variables of '{definition.id}' to defaults.")
        return self.initial_assignment(definition)
