# src/vlab_core/formulas/__init__.py
import logging
logger = logging.getLogger(__name__)

from .exceptions import (
    FormulaError,
    FormulaSyntaxError,
    FormulaScopeError,
    CircularFormulaDependencyError,
)
from .preprocessor import ExpressionPreprocessor, FORMULA_FUNCTIONS, FORMULA_NAMED_CONSTANTS
from .formula import CompiledFormula, FormulaCompiler

__all__ = [
    "FormulaError",
    "FormulaSyntaxError",
    "FormulaScopeError",
    "CircularFormulaDependencyError",
    "ExpressionPreprocessor",
    "FORMULA_FUNCTIONS",
    "FORMULA_NAMED_CONSTANTS",
    "CompiledFormula",
    "FormulaCompiler",
]
