# src/vlab_core/engine/exceptions.py
"""
Diagnosable exceptions raised by the evaluation engine and simulation sessions.

Both errors signal caller programming mistakes (a key the definition never declared,
an operation on a session with nothing selected). They fail the single call and leave
any previous assignment or session state untouched.
"""
from typing import Optional, Sequence

from ..errors import DiagnosableError, format_diagnostic_report


class EngineError(DiagnosableError):
    """A local, concrete base class for evaluation engine errors."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Evaluation Engine Error",
            details=str(self),
            suggestion="Check the call sequence against the selected simulation definition.",
            context={}
        )


class UnknownVariableKey(EngineError, KeyError):
    """
    Raised by `set_variable` when the key is not one of the definition's declared
    variable keys. It is also a `KeyError`, so mapping-style callers can catch it as one.
    """
    def __init__(self, key: str, declared_keys: Sequence[str], simulation_id: Optional[str] = None):
        self.key = key
        self.declared_keys = tuple(declared_keys)
        self.simulation_id = simulation_id
        super().__init__(key)

    def __str__(self):
        owner = f" of simulation '{self.simulation_id}'" if self.simulation_id else ""
        return (f"Unknown variable key '{self.key}'{owner}. "
                f"Declared keys are: {list(self.declared_keys)}")

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Unknown Variable Key",
            details=(f"The key '{self.key}' is not declared by this simulation.\n"
                     f"Declared variable keys: {', '.join(self.declared_keys) or '(none)'}"),
            suggestion="Only offer controls for the variable keys declared by the selected definition.",
            context={'simulation_id': self.simulation_id, 'user_input': self.key}
        )


class NoActiveSimulationError(EngineError):
    """Raised when a session operation needs a selected definition but the session is idle."""
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(operation)

    def __str__(self):
        return f"Cannot '{self.operation}': no simulation is selected."

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="No Active Simulation",
            details=str(self),
            suggestion="Call select(definition) before changing variables, evaluating or taking snapshots.",
            context={}
        )
