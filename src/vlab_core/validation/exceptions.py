# src/vlab_core/validation/exceptions.py
"""
The diagnosable exception raised when a set of simulation definitions fails validation.

`DefinitionValidationError` collects every ERROR-level `ValidationIssue` of one
validation pass, so a single report lists all problems of a catalog at once instead of
stopping at the first.
"""
from typing import List

from .issues import ValidationIssue, ValidationIssueLevel
from ..errors import DiagnosableError, format_diagnostic_report


class DefinitionValidationError(DiagnosableError):
    """Raised when definition validation finds one or more ERROR-level issues."""

    def __init__(self, issues: List[ValidationIssue], registry_name: str = "registry"):
        self.registry_name = registry_name
        self.issues: List[ValidationIssue] = [
            issue for issue in issues if issue.level == ValidationIssueLevel.ERROR
        ]
        if not self.issues:
            summary_message = "DefinitionValidationError was raised with no error-level issues."
        else:
            summary_message = (
                f"Definition validation of '{registry_name}' failed with {len(self.issues)} error(s):\n"
                + "\n".join(f"  - {issue}" for issue in self.issues)
            )
        super().__init__(summary_message)

    def get_diagnostic_report(self) -> str:
        details = (
            f"One or more simulation definitions of '{self.registry_name}' are invalid.\n"
            f"Found {len(self.issues)} error(s). See details below:\n\n"
            + "\n".join(f"  - {issue}" for issue in self.issues)
        )

        first_issue = self.issues[0] if self.issues else None
        context = {}
        if first_issue:
            context['simulation_id'] = first_issue.simulation_id or 'Multiple'
            if source_path := first_issue.details.get('source_file'):
                context['source_file'] = source_path

        return format_diagnostic_report(
            error_type="Simulation Definition Validation Error",
            details=details,
            suggestion="Correct every definition listed above; ids, variable keys and output keys must be unique and every default must lie within its [min, max] range.",
            context=context
        )
