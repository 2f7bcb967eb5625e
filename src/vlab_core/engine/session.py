# src/vlab_core/engine/session.py
import logging
import time
from typing import Any, Callable, Mapping, Optional

from ..data_structures import SimulationDefinition
from ..history.snapshot import Snapshot
from .assignment import VariableAssignment
from .engine import EvaluationEngine
from .exceptions import NoActiveSimulationError

logger = logging.getLogger(__name__)


class SimulationSession:
    """
    One user's open simulation: either Idle (nothing selected) or Assigned (a definition
    plus the session-owned variable assignment).

    `select` (from either state) seeds the assignment from defaults, `set_variable` and
    `reset` stay in Assigned, and `deselect` returns to Idle. A failing call raises and
    leaves the previous state untouched; there is no error state.
    """

    def __init__(self, engine: Optional[EvaluationEngine] = None):
        self.engine = engine or EvaluationEngine()
        self._definition: Optional[SimulationDefinition] = None
        self._assignment: Optional[VariableAssignment] = None

    @property
    def is_idle(self) -> bool:
        return self._definition is None

    @property
    def definition(self) -> Optional[SimulationDefinition]:
        return self._definition

    @property
    def assignment(self) -> VariableAssignment:
        self._require_active("read assignment")
        return self._assignment

    def _require_active(self, operation: str):
        if self._definition is None:
            raise NoActiveSimulationError(operation)

    def select(self, definition: SimulationDefinition) -> VariableAssignment:
        assignment = self.engine.initial_assignment(definition)
        self._definition = definition
        self._assignment = assignment
        logger.debug(f"Session selected '{definition.id}'.")
        return assignment

    def set_variable(self, key: str, value: Any) -> VariableAssignment:
        self._require_active("set variable")
        # replace() raises before anything is stored, so a bad key or value keeps the old assignment.
        self._assignment = self.engine.set_variable(self._assignment, key, value)
        return self._assignment

    @property
    def outputs(self) -> Mapping[str, float]:
        """Fresh output assignment for the current variables."""
        self._require_active("evaluate")
        return self.engine.evaluate(self._definition, self._assignment)

    def reset(self) -> VariableAssignment:
        self._require_active("reset")
        self._assignment = self.engine.reset(self._definition)
        return self._assignment

    def deselect(self) -> None:
        if self._definition is not None:
            logger.debug(f"Session deselected '{self._definition.id}'.")
        self._definition = None
        self._assignment = None

    def snapshot(self, clock: Callable[[], float] = time.time, score: Optional[int] = None) -> Snapshot:
        """Captures the current (variables, outputs) pair for the history recorder."""
        self._require_active("snapshot")
        return Snapshot(
            definition_id=self._definition.id,
            variables=self._assignment.to_dict(),
            outputs=dict(self.outputs),
            timestamp=clock(),
            score=score,
        )
