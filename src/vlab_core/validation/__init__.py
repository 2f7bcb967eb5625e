# src/vlab_core/validation/__init__.py
import logging
logger = logging.getLogger(__name__)

from .issues import ValidationIssue, ValidationIssueLevel
from .issue_codes import DefinitionIssueCode
from .definition_validator import DefinitionValidator
from .exceptions import DefinitionValidationError

__all__ = [
    "ValidationIssue",
    "ValidationIssueLevel",
    "DefinitionIssueCode",
    "DefinitionValidator",
    "DefinitionValidationError",
]
