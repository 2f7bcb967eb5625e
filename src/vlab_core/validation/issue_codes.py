# src/vlab_core/validation/issue_codes.py
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class DefinitionIssueCode(Enum):
    """
    Registry of definition validation issue codes and their message templates.
    Each enum member's value is a tuple: (code_str, message_template_str).
    """

    # --- Identity Issues (DEF_...) ---
    DEF_ID_DUPLICATE = ("DEF_ID_DUPLICATE", "Simulation id '{simulation_id}' is used by {count} definitions; ids must be unique across the registry.")
    DEF_ID_EMPTY = ("DEF_ID_EMPTY", "Definition at position {index} ('{name}') has an empty id.")

    # --- Key Collisions (VAR_/OUT_..._DUPLICATE) ---
    VAR_KEY_DUPLICATE = ("VAR_KEY_DUPLICATE", "Simulation '{simulation_id}' declares variable key '{key}' {count} times.")
    OUT_KEY_DUPLICATE = ("OUT_KEY_DUPLICATE", "Simulation '{simulation_id}' declares output key '{key}' {count} times.")

    # --- Variable Bounds (VAR_...) ---
    VAR_RANGE_INVERTED = ("VAR_RANGE_INVERTED", "Variable '{key}' of simulation '{simulation_id}' has min {min} greater than max {max}.")
    VAR_DEFAULT_OUT_OF_RANGE = ("VAR_DEFAULT_OUT_OF_RANGE", "Default {default} of variable '{key}' in simulation '{simulation_id}' lies outside [{min}, {max}].")
    VAR_STEP_NON_POSITIVE = ("VAR_STEP_NON_POSITIVE", "Variable '{key}' of simulation '{simulation_id}' has non-positive step {step}.")
    VAR_BOUND_NON_FINITE = ("VAR_BOUND_NON_FINITE", "Variable '{key}' of simulation '{simulation_id}' has a non-finite {bound} ({value}).")
    VAR_DEFAULT_OFF_STEP = ("VAR_DEFAULT_OFF_STEP", "Default {default} of variable '{key}' in simulation '{simulation_id}' is not on the step grid min + k*{step}.")

    # --- Units (..._UNIT_UNRECOGNIZED) ---
    VAR_UNIT_UNRECOGNIZED = ("VAR_UNIT_UNRECOGNIZED", "Unit '{unit}' of variable '{key}' in simulation '{simulation_id}' is not recognized by the unit registry.")
    OUT_UNIT_UNRECOGNIZED = ("OUT_UNIT_UNRECOGNIZED", "Unit '{unit}' of output '{key}' in simulation '{simulation_id}' is not recognized by the unit registry.")

    # --- Compute Rule Probes at Defaults (COMPUTE_...) ---
    COMPUTE_RAISED = ("COMPUTE_RAISED", "Compute rule of simulation '{simulation_id}' raised {error_type} at the default assignment: {error}")
    COMPUTE_MISSING_OUTPUT = ("COMPUTE_MISSING_OUTPUT", "Compute rule of simulation '{simulation_id}' did not return declared output(s): {missing_keys}.")
    COMPUTE_NONDETERMINISTIC = ("COMPUTE_NONDETERMINISTIC", "Compute rule of simulation '{simulation_id}' returned different values for output(s) {keys} on two evaluations of the same assignment.")
    COMPUTE_NON_FINITE_DEFAULT = ("COMPUTE_NON_FINITE_DEFAULT", "Output '{key}' of simulation '{simulation_id}' is non-finite ({value}) at the default assignment.")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def template(self) -> str:
        return self.value[1]

    def format_message(self, **kwargs) -> str:
        """Formats the message template with provided keyword arguments."""
        try:
            return self.template.format(**kwargs)
        except KeyError as e:
            logger.error(f"Missing key {e} for formatting message template of {self.name} (code: {self.code}): '{self.template}'. Provided args: {kwargs}")
            return f"Error formatting message for {self.code}: Missing key {e}. Template: '{self.template}' Args: {kwargs}"
