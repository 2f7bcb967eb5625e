# src/vlab_core/validation/issues.py
import logging
from enum import Enum
import dataclasses
from dataclasses import dataclass
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class ValidationIssueLevel(Enum):
    """Severity level of a validation issue."""
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"

    def __str__(self):
        return self.value


@dataclass
class ValidationIssue:
    """
    Represents a single issue found while checking simulation definitions.
    Carries the owning simulation id (and the variable/output key when one applies)
    for actionable diagnostics.
    """
    level: ValidationIssueLevel
    code: str
    message: str
    simulation_id: Optional[str] = None
    field: Optional[str] = None
    details: Dict[str, Any] = dataclasses.field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.level.name} - {self.code}]"]
        if self.simulation_id:
            parts.append(f"Simulation: {self.simulation_id}")
        if self.field:
            parts.append(f"Field: {self.field}")
        parts.append(f"Message: {self.message}")

        if self.details:
            filtered_details = {
                k: v for k, v in self.details.items()
                if k not in ['simulation_id', 'field']
            }
            if filtered_details:
                details_str = ", ".join(f"{k}={v}" for k, v in sorted(filtered_details.items()))
                parts.append(f"Details: ({details_str})")

        return " ".join(parts)
