# src/vlab_core/validation/definition_validator.py
import logging
import math
from collections import Counter
from typing import Any, List, Mapping, Optional, Sequence

from ..data_structures import SimulationDefinition, VariableDescriptor
from ..units import parse_display_unit
from .issues import ValidationIssue, ValidationIssueLevel
from .issue_codes import DefinitionIssueCode

logger = logging.getLogger(__name__)

# Relative tolerance for deciding whether a default lies on its step grid.
_STEP_GRID_TOLERANCE = 1e-6


def _same_value(a: Any, b: Any) -> bool:
    """Bitwise-style equality for two evaluations of one output; NaN equals NaN."""
    try:
        fa, fb = float(a), float(b)
    except (TypeError, ValueError):
        return a == b
    if math.isnan(fa) and math.isnan(fb):
        return True
    return fa == fb


class DefinitionValidator:
    """
    Checks a sequence of simulation definitions against the schema invariants before
    they are frozen into a registry.

    Structural checks (unique ids, unique keys, ordered bounds) are followed by a probe
    of each compute rule at its default assignment: it must not raise, must return
    every declared output, and must return the same values when called twice. Probes
    are skipped for definitions whose variables are structurally broken.
    """

    def __init__(self, definitions: Sequence[SimulationDefinition], source_file: Optional[str] = None):
        self.definitions = list(definitions)
        self.source_file = source_file
        self.issues: List[ValidationIssue] = []

    def validate(self) -> List[ValidationIssue]:
        """
        Runs every check.

        Returns:
            A list of all `ValidationIssue` objects found (errors, warnings and info).
            The caller decides whether ERROR-level issues abort construction.
        """
        self.issues = []
        logger.info(f"Starting validation of {len(self.definitions)} simulation definition(s)...")
        self._check_ids()
        for definition in self.definitions:
            structurally_sound = self._check_keys(definition)
            structurally_sound &= self._check_variables(definition)
            self._check_units(definition)
            if structurally_sound:
                self._probe_compute(definition)

        if self.issues:
            errors = sum(1 for i in self.issues if i.level == ValidationIssueLevel.ERROR)
            warnings = sum(1 for i in self.issues if i.level == ValidationIssueLevel.WARNING)
            infos = sum(1 for i in self.issues if i.level == ValidationIssueLevel.INFO)
            logger.info(f"Validation complete. Found: {errors} errors, {warnings} warnings, {infos} info messages.")
        else:
            logger.info("Validation complete with no issues found.")

        return self.issues

    def _add_issue(self, level: ValidationIssueLevel, code_enum: DefinitionIssueCode,
                   field: Optional[str] = None, **kwargs):
        message = code_enum.format_message(**kwargs)
        details = dict(kwargs)
        if self.source_file:
            details['source_file'] = self.source_file
        self.issues.append(ValidationIssue(
            level=level, code=code_enum.code, message=message,
            simulation_id=kwargs.get('simulation_id'), field=field, details=details
        ))

    # --- Registry-wide checks ---

    def _check_ids(self):
        for index, definition in enumerate(self.definitions):
            if not definition.id or not str(definition.id).strip():
                self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.DEF_ID_EMPTY,
                                index=index, name=definition.name)

        counts = Counter(d.id for d in self.definitions if d.id)
        for simulation_id, count in counts.items():
            if count > 1:
                self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.DEF_ID_DUPLICATE,
                                field="id", simulation_id=simulation_id, count=count)

    # --- Per-definition checks ---

    def _check_keys(self, definition: SimulationDefinition) -> bool:
        sound = True
        for key, count in Counter(definition.variable_keys).items():
            if count > 1:
                sound = False
                self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.VAR_KEY_DUPLICATE,
                                field=f"variables.{key}", simulation_id=definition.id, key=key, count=count)
        for key, count in Counter(definition.output_keys).items():
            if count > 1:
                sound = False
                self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.OUT_KEY_DUPLICATE,
                                field=f"outputs.{key}", simulation_id=definition.id, key=key, count=count)
        return sound

    def _check_variables(self, definition: SimulationDefinition) -> bool:
        sound = True
        for variable in definition.variables:
            sound &= self._check_variable(definition.id, variable)
        return sound

    def _check_variable(self, simulation_id: str, variable: VariableDescriptor) -> bool:
        field = f"variables.{variable.key}"
        bounds = {'min': variable.min, 'max': variable.max, 'default': variable.default}
        non_finite = False
        for bound, value in bounds.items():
            if not math.isfinite(value):
                non_finite = True
                self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.VAR_BOUND_NON_FINITE,
                                field=field, simulation_id=simulation_id, key=variable.key,
                                bound=bound, value=value)
        if non_finite:
            return False

        sound = True
        if variable.min > variable.max:
            sound = False
            self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.VAR_RANGE_INVERTED,
                            field=field, simulation_id=simulation_id, key=variable.key,
                            min=variable.min, max=variable.max)
        elif not (variable.min <= variable.default <= variable.max):
            sound = False
            self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.VAR_DEFAULT_OUT_OF_RANGE,
                            field=field, simulation_id=simulation_id, key=variable.key,
                            default=variable.default, min=variable.min, max=variable.max)

        if variable.step is not None:
            if not math.isfinite(variable.step) or variable.step <= 0:
                # A bad step only affects the UI grid; the compute probe is still meaningful.
                self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.VAR_STEP_NON_POSITIVE,
                                field=field, simulation_id=simulation_id, key=variable.key, step=variable.step)
            elif sound and not self._on_step_grid(variable):
                self._add_issue(ValidationIssueLevel.WARNING, DefinitionIssueCode.VAR_DEFAULT_OFF_STEP,
                                field=field, simulation_id=simulation_id, key=variable.key,
                                default=variable.default, step=variable.step)
        return sound

    @staticmethod
    def _on_step_grid(variable: VariableDescriptor) -> bool:
        steps = (variable.default - variable.min) / variable.step
        return abs(steps - round(steps)) <= _STEP_GRID_TOLERANCE * max(1.0, abs(steps))

    def _check_units(self, definition: SimulationDefinition):
        for variable in definition.variables:
            if variable.unit and parse_display_unit(variable.unit) is None:
                self._add_issue(ValidationIssueLevel.WARNING, DefinitionIssueCode.VAR_UNIT_UNRECOGNIZED,
                                field=f"variables.{variable.key}", simulation_id=definition.id,
                                key=variable.key, unit=variable.unit)
        for output in definition.outputs:
            if output.unit and parse_display_unit(output.unit) is None:
                self._add_issue(ValidationIssueLevel.WARNING, DefinitionIssueCode.OUT_UNIT_UNRECOGNIZED,
                                field=f"outputs.{output.key}", simulation_id=definition.id,
                                key=output.key, unit=output.unit)

    # --- Compute probe at defaults ---

    def _probe_compute(self, definition: SimulationDefinition):
        defaults = {variable.key: variable.default for variable in definition.variables}
        try:
            first = definition.compute(dict(defaults))
            second = definition.compute(dict(defaults))
        except Exception as e:
            self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.COMPUTE_RAISED,
                            field="compute", simulation_id=definition.id,
                            error_type=type(e).__name__, error=str(e))
            return

        if not isinstance(first, Mapping) or not isinstance(second, Mapping):
            self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.COMPUTE_MISSING_OUTPUT,
                            field="compute", simulation_id=definition.id,
                            missing_keys=list(definition.output_keys))
            return

        missing = [key for key in definition.output_keys if key not in first]
        if missing:
            self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.COMPUTE_MISSING_OUTPUT,
                            field="compute", simulation_id=definition.id, missing_keys=missing)
            return

        unstable = [key for key in definition.output_keys
                    if key not in second or not _same_value(first[key], second[key])]
        if unstable:
            self._add_issue(ValidationIssueLevel.ERROR, DefinitionIssueCode.COMPUTE_NONDETERMINISTIC,
                            field="compute", simulation_id=definition.id, keys=unstable)
            return

        for key in definition.output_keys:
            try:
                value = float(first[key])
            except (TypeError, ValueError):
                continue
            if not math.isfinite(value):
                self._add_issue(ValidationIssueLevel.INFO, DefinitionIssueCode.COMPUTE_NON_FINITE_DEFAULT,
                                field=f"outputs.{key}", simulation_id=definition.id, key=key, value=value)
