# src/vlab_core/formulas/exceptions.py
"""
Diagnosable exceptions for compiling catalog output expressions.

Every error carries the owning simulation id, the output key whose expression failed
and the raw expression text, so the registry builder can turn it into an actionable
configuration report pointing at the exact catalog entry.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..errors import DiagnosableError, format_diagnostic_report


class FormulaError(DiagnosableError):
    """A concrete base class for all formula compilation errors."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Formula Error",
            details=str(self),
            suggestion="Review the output expressions in the simulation catalog.",
            context={}
        )


@dataclass(eq=False)
class FormulaSyntaxError(FormulaError):
    """Raised for an expression that cannot be parsed or uses an unsupported construct."""
    simulation_id: str
    output_key: str
    user_input: str
    details: str
    source_file: Optional[Path] = None

    def __str__(self):
        return (f"Invalid expression for output '{self.output_key}' of simulation "
                f"'{self.simulation_id}' ('{self.user_input}'): {self.details}")

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Invalid Output Expression",
            details=self.details,
            suggestion=("Use plain arithmetic (+ - * / ** %), comparisons inside where(), and the "
                        "supported functions: sqrt, exp, log, log10, sin, cos, tan, asin, acos, atan, "
                        "atan2, abs, sign, floor, min, max, where, guard."),
            context={
                'simulation_id': self.simulation_id,
                'field': f"outputs.{self.output_key}.expression",
                'source_file': self.source_file,
                'user_input': self.user_input,
            }
        )


@dataclass(eq=False)
class FormulaScopeError(FormulaError):
    """Raised when an expression references an identifier that is not a variable, output, constant or function."""
    simulation_id: str
    output_key: str
    unresolved_symbol: str
    user_input: str
    available: str = ""
    source_file: Optional[Path] = None

    def __str__(self):
        return (f"Unresolved identifier '{self.unresolved_symbol}' in expression for output "
                f"'{self.output_key}' of simulation '{self.simulation_id}' ('{self.user_input}')")

    def get_diagnostic_report(self) -> str:
        details = (f"The identifier '{self.unresolved_symbol}' is not a variable, output or constant of "
                   f"simulation '{self.simulation_id}'.")
        if self.available:
            details += f"\nIdentifiers in scope: {self.available}"
        return format_diagnostic_report(
            error_type="Unresolved Identifier in Expression",
            details=details,
            suggestion="Check the spelling, or declare the identifier as a variable or as a catalog constant.",
            context={
                'simulation_id': self.simulation_id,
                'field': f"outputs.{self.output_key}.expression",
                'source_file': self.source_file,
                'user_input': self.user_input,
            }
        )


@dataclass(eq=False)
class CircularFormulaDependencyError(FormulaError):
    """Raised when output expressions of one simulation depend on each other in a cycle."""
    simulation_id: str
    cycle: List[str]
    source_file: Optional[Path] = None

    def __str__(self):
        cycle_str = " -> ".join(self.cycle + self.cycle[:1]) if self.cycle else "(unknown)"
        return f"Circular output dependency in simulation '{self.simulation_id}': {cycle_str}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Circular Output Dependency",
            details=str(self),
            suggestion="Rewrite at least one output in the cycle in terms of the simulation's variables.",
            context={'simulation_id': self.simulation_id, 'source_file': self.source_file}
        )
