# src/vlab_core/registry.py
"""
The immutable simulation registry.

A registry is built exactly once, through `SimulationRegistry.register`, which runs the
definition validator and refuses to construct anything if an ERROR-level issue exists
(duplicate ids, key collisions inside a definition, min/default/max ordering, a compute
rule that raises at its defaults, ...). The failure surfaces as a single
`ConfigurationError` carrying the full diagnostic report. After construction the
registry is read-only and may be shared freely between sessions.
"""
import logging
from typing import Dict, Iterable, Iterator, Optional, Tuple

from .constants import ALL_CATEGORIES
from .data_structures import SimulationDefinition
from .errors import ConfigurationError, DiagnosableError
from .validation import DefinitionValidator, DefinitionValidationError, ValidationIssue, ValidationIssueLevel

logger = logging.getLogger(__name__)


class SimulationRegistry:
    """
    Ordered, immutable collection of simulation definitions with globally unique ids.

    Use `SimulationRegistry.register(...)` to build one; the constructor assumes its
    input has already been validated.
    """

    def __init__(self, definitions: Tuple[SimulationDefinition, ...], name: str,
                 issues: Tuple[ValidationIssue, ...] = ()):
        self._definitions: Tuple[SimulationDefinition, ...] = tuple(definitions)
        self._by_id: Dict[str, SimulationDefinition] = {d.id: d for d in self._definitions}
        self._name = name
        self._issues: Tuple[ValidationIssue, ...] = tuple(issues)

    @classmethod
    def register(cls, definitions: Iterable[SimulationDefinition], name: str = "registry",
                 source_file: Optional[str] = None) -> "SimulationRegistry":
        """
        Validates `definitions` and freezes them into a registry.

        Raises:
            ConfigurationError: if any ERROR-level validation issue is found. The message
                is the diagnostic report listing every error.
        """
        definitions = tuple(definitions)
        logger.info(f"--- Building simulation registry '{name}' from {len(definitions)} definition(s) ---")
        try:
            issues = DefinitionValidator(definitions, source_file=source_file).validate()
            if any(issue.level == ValidationIssueLevel.ERROR for issue in issues):
                raise DefinitionValidationError(issues, registry_name=name)
        except DiagnosableError as e:
            raise ConfigurationError(e.get_diagnostic_report()) from e

        for issue in issues:
            if issue.level == ValidationIssueLevel.WARNING:
                logger.warning(str(issue))
            else:
                logger.debug(str(issue))

        registry = cls(definitions, name=name, issues=tuple(issues))
        logger.info(f"--- Simulation registry '{name}' ready with {len(registry)} definition(s). ---")
        return registry

    @property
    def name(self) -> str:
        return self._name

    @property
    def issues(self) -> Tuple[ValidationIssue, ...]:
        """Non-fatal (WARNING/INFO) issues found while the registry was built."""
        return self._issues

    def get(self, simulation_id: str) -> Optional[SimulationDefinition]:
        """Exact lookup by id. Returns None for an unknown id."""
        return self._by_id.get(simulation_id)

    def list(self) -> Tuple[SimulationDefinition, ...]:
        """All definitions in registration order."""
        return self._definitions

    def categories(self) -> Tuple[str, ...]:
        """The "all" pseudo-category followed by the distinct categories in registry order."""
        seen = dict.fromkeys(d.category for d in self._definitions)
        seen.pop(ALL_CATEGORIES, None)
        return (ALL_CATEGORIES, *seen)

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[SimulationDefinition]:
        return iter(self._definitions)

    def __contains__(self, simulation_id: object) -> bool:
        return simulation_id in self._by_id

    def __repr__(self) -> str:
        return f"SimulationRegistry(name={self._name!r}, definitions={len(self._definitions)})"
