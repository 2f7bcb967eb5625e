# src/vlab_core/catalog/exceptions.py
"""
Diagnosable exceptions for loading catalog YAML files.

`CatalogParsingError` covers file-level problems (missing file, unreadable file,
invalid YAML, wrong root type). `CatalogSchemaError` covers documents that load but
do not match the catalog schema; it lists every violation cerberus reported.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from ..errors import DiagnosableError, format_diagnostic_report


class BaseCatalogError(DiagnosableError):
    """A local, concrete base class for all catalog loading errors."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Catalog Error",
            details=str(self),
            suggestion="Please check the format and content of the catalog YAML file.",
            context={}
        )


@dataclass(eq=False)
class CatalogParsingError(BaseCatalogError):
    """Raised when a catalog file cannot be read or is not valid YAML."""
    details: str
    file_path: Path

    def __str__(self):
        return f"Catalog parsing error in file '{self.file_path}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="YAML Parsing or File Error",
            details=self.details,
            suggestion="Ensure the file exists, is readable, and contains a YAML mapping at its root.",
            context={'source_file': self.file_path}
        )


def _flatten_errors(errors: Any, prefix: str = "") -> Dict[str, str]:
    """Flattens cerberus' nested error tree into 'path.to.field' -> first message."""
    flat: Dict[str, str] = {}
    if isinstance(errors, dict):
        for key, value in errors.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            flat.update(_flatten_errors(value, path))
    elif isinstance(errors, list):
        for item in errors:
            if isinstance(item, (dict, list)):
                flat.update(_flatten_errors(item, prefix))
            else:
                flat.setdefault(prefix, str(item))
    else:
        flat.setdefault(prefix, str(errors))
    return flat


@dataclass(eq=False)
class CatalogSchemaError(BaseCatalogError):
    """
    Raised when a catalog is valid YAML but does not conform to the schema
    (missing keys, invalid identifiers, duplicate ids or keys, wrong value types).
    """
    errors: Dict[str, Any]
    file_path: Path

    @property
    def flat_errors(self) -> Dict[str, str]:
        return _flatten_errors(self.errors)

    def __str__(self):
        error_lines = [f"  - In field '{k}': {v}" for k, v in sorted(self.flat_errors.items())]
        return (
            f"Catalog schema validation failed for file '{self.file_path}':\n"
            + "\n".join(error_lines)
        )

    def get_diagnostic_report(self) -> str:
        flat = self.flat_errors
        error_list_str = "\n".join(f"  - Field '{k}': {v}" for k, v in sorted(flat.items()))
        details = (
            "The structure of the catalog file does not conform to the required schema.\n"
            f"See details for {len(flat)} issue(s) below:\n\n{error_list_str}"
        )
        return format_diagnostic_report(
            error_type="Catalog Schema Validation Error",
            details=details,
            suggestion=("Correct the specified fields. Ids and keys must be identifiers (letters, digits, '_'), "
                        "must not be Python keywords, and must be unique. Write floats with a decimal point "
                        "and a signed exponent (e.g. 5.97e+24) so YAML reads them as numbers."),
            context={'source_file': self.file_path}
        )
