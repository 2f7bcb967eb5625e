# src/vlab_core/selection.py
import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

from .constants import ALL_CATEGORIES
from .data_structures import SimulationDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationQuery:
    """A user query: free search text plus a category ("all" means no category filter)."""
    text: str = ""
    category: str = ALL_CATEGORIES

    def matches(self, definition: SimulationDefinition) -> bool:
        needle = self.text.strip().casefold()
        if needle and needle not in definition.search_text.casefold():
            return False
        return self.category == ALL_CATEGORIES or definition.category == self.category


def filter_definitions(registry: Iterable[SimulationDefinition],
                       query: SimulationQuery = SimulationQuery()) -> Tuple[SimulationDefinition, ...]:
    """
    Returns the definitions matching both the text and the category of `query`,
    in registry order. Text matching is a case-insensitive substring test over the
    definition's name, category and description; category matching is exact.
    """
    result = tuple(d for d in registry if query.matches(d))
    logger.debug(f"Filter {query} matched {len(result)} definition(s).")
    return result
