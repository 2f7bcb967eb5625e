# src/vlab_core/engine/assignment.py
import logging
from typing import Any, Dict, Iterator, Mapping, Optional

from .exceptions import UnknownVariableKey

logger = logging.getLogger(__name__)


class VariableAssignment(Mapping[str, float]):
    """
    An immutable mapping from every declared variable key of one definition to a value.

    The key set is fixed at construction. `replace()` is the only way to obtain a
    different assignment and it refuses keys outside that set, so a typo such as
    'mass' for 'm' fails loudly instead of producing a silently ignored entry.
    """
    __slots__ = ('_values', '_simulation_id')

    def __init__(self, values: Mapping[str, Any], simulation_id: Optional[str] = None):
        self._values: Dict[str, float] = {key: float(value) for key, value in values.items()}
        self._simulation_id = simulation_id

    @property
    def simulation_id(self) -> Optional[str]:
        return self._simulation_id

    def __getitem__(self, key: str) -> float:
        try:
            return self._values[key]
        except KeyError:
            raise UnknownVariableKey(key, tuple(self._values), self._simulation_id) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"VariableAssignment({self._values!r}, simulation_id={self._simulation_id!r})"

    def replace(self, key: str, value: Any) -> 'VariableAssignment':
        """Returns a new assignment equal to this one except that `key` maps to `float(value)`."""
        if key not in self._values:
            raise UnknownVariableKey(key, tuple(self._values), self._simulation_id)
        new_value = float(value)
        updated = dict(self._values)
        updated[key] = new_value
        return VariableAssignment(updated, self._simulation_id)

    def to_dict(self) -> Dict[str, float]:
        return dict(self._values)
