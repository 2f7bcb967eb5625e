# src/vlab_core/formulas/preprocessor.py
import ast
import logging
from collections import ChainMap
from pathlib import Path
from typing import Any, Dict, Optional

import sympy
from sympy.parsing.sympy_parser import parse_expr

from ..constants import EPSILON
from . import exceptions as formula_exc

logger = logging.getLogger(__name__)


def _log10(x):
    return sympy.log(x, 10)


def _where(condition, if_true, if_false):
    """where(cond, a, b): a when cond holds, else b."""
    return sympy.Piecewise((if_true, condition), (if_false, True))


def _guard(x):
    """
    guard(x): x, unless |x| < EPSILON, in which case EPSILON.
    The single convention for keeping denominators away from zero.
    """
    return sympy.Piecewise((sympy.Float(EPSILON), sympy.Abs(x) < EPSILON), (x, True))


#: Callable names an expression may use, mapped to the SymPy objects they build.
FORMULA_FUNCTIONS: Dict[str, Any] = {
    "sqrt": sympy.sqrt, "exp": sympy.exp, "log": sympy.log, "log10": _log10,
    "sin": sympy.sin, "cos": sympy.cos, "tan": sympy.tan,
    "asin": sympy.asin, "acos": sympy.acos, "atan": sympy.atan, "atan2": sympy.atan2,
    "abs": sympy.Abs, "sign": sympy.sign, "floor": sympy.floor,
    "min": sympy.Min, "max": sympy.Max, "Min": sympy.Min, "Max": sympy.Max,
    "where": _where, "guard": _guard,
}

#: Named numeric constants that are always available.
FORMULA_NAMED_CONSTANTS: Dict[str, Any] = {"pi": sympy.pi}

_PARSE_GLOBALS: Dict[str, Any] = {
    "Symbol": sympy.Symbol, "Integer": sympy.Integer, "Float": sympy.Float, "Rational": sympy.Rational,
    "Add": sympy.Add, "Mul": sympy.Mul, "Pow": sympy.Pow,
    **FORMULA_FUNCTIONS,
    **FORMULA_NAMED_CONSTANTS,
}

_ALLOWED_NODES = (
    ast.Expression, ast.BinOp, ast.UnaryOp, ast.Call, ast.Name, ast.Load, ast.Constant, ast.Compare,
    ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Pow, ast.Mod, ast.USub, ast.UAdd,
    ast.Lt, ast.LtE, ast.Gt, ast.GtE,
)


class _AstTransformer(ast.NodeTransformer):
    """
    Replaces every identifier of an expression with a unique placeholder bound to the
    SymPy object it resolves to, so that SymPy never interprets user identifiers itself
    (keys such as 'E', 'I', 'S' or 'beta' would otherwise collide with SymPy names).
    """
    def __init__(self, simulation_id: str, output_key: str, raw_expr: str,
                 scope: ChainMap, source_file: Optional[Path]):
        self.simulation_id = simulation_id
        self.output_key = output_key
        self.raw_expr = raw_expr
        self.scope = scope
        self.source_file = source_file
        self.symbol_map: Dict[str, Any] = {}
        self._placeholder_counter = 0

    def _syntax_error(self, details: str) -> formula_exc.FormulaSyntaxError:
        return formula_exc.FormulaSyntaxError(
            simulation_id=self.simulation_id,
            output_key=self.output_key,
            user_input=self.raw_expr,
            details=details,
            source_file=self.source_file,
        )

    def _get_placeholder(self) -> str:
        name = f"_vlab_var_{self._placeholder_counter}"
        self._placeholder_counter += 1
        return name

    def visit(self, node: ast.AST):
        if not isinstance(node, _ALLOWED_NODES):
            if isinstance(node, ast.BitXor):
                raise self._syntax_error("'^' is not a power operator; use '**'.")
            raise self._syntax_error(f"Unsupported construct '{type(node).__name__}'.")
        return super().visit(node)

    def visit_Compare(self, node: ast.Compare) -> ast.AST:
        if len(node.ops) != 1:
            raise self._syntax_error("Chained comparisons are not supported; use a single comparison.")
        return self.generic_visit(node)

    def visit_Constant(self, node: ast.Constant) -> ast.AST:
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise self._syntax_error(f"Only numeric literals are allowed, got {node.value!r}.")
        return node

    def visit_Call(self, node: ast.Call) -> ast.AST:
        if not isinstance(node.func, ast.Name) or node.func.id not in FORMULA_FUNCTIONS or node.func.id in self.scope:
            name = node.func.id if isinstance(node.func, ast.Name) else ast.unparse(node.func)
            raise self._syntax_error(f"'{name}' is not a supported function.")
        if node.keywords:
            raise self._syntax_error(f"Keyword arguments are not supported in call to '{node.func.id}'.")
        node.args = [self.visit(arg) for arg in node.args]
        return node

    def visit_Name(self, node: ast.Name) -> ast.Name:
        name = node.id
        if name in self.scope:
            placeholder = self._get_placeholder()
            self.symbol_map[placeholder] = self.scope[name]
            return ast.Name(id=placeholder, ctx=ast.Load())

        if name in FORMULA_NAMED_CONSTANTS:
            return node

        raise formula_exc.FormulaScopeError(
            simulation_id=self.simulation_id,
            output_key=self.output_key,
            unresolved_symbol=name,
            user_input=self.raw_expr,
            available=", ".join(sorted(self.scope.keys())),
            source_file=self.source_file,
        )


class ExpressionPreprocessor:
    """
    Turns an output expression string into a SymPy expression whose free symbols are
    exactly the variable and output symbols found in `scope`.

    `scope` is a ChainMap of identifier -> SymPy object, searched in order: the
    definition's variables, its outputs, then constants (constants resolve directly to
    numbers, so they never appear as free symbols).
    """
    def preprocess(self, simulation_id: str, output_key: str, raw_expr: str,
                   scope: ChainMap, source_file: Optional[Path] = None) -> sympy.Expr:
        try:
            tree = ast.parse(raw_expr.strip(), mode='eval')
        except SyntaxError as e:
            raise formula_exc.FormulaSyntaxError(
                simulation_id=simulation_id,
                output_key=output_key,
                user_input=raw_expr,
                details=f"Invalid Python syntax: {e}",
                source_file=source_file,
            ) from e

        transformer = _AstTransformer(simulation_id, output_key, raw_expr, scope, source_file)
        transformed_tree = transformer.visit(tree)

        try:
            safe_expr_str = ast.unparse(transformed_tree)
            sympy_expr = parse_expr(
                safe_expr_str,
                local_dict=transformer.symbol_map,
                global_dict=_PARSE_GLOBALS,
            )
        except Exception as e:
            raise formula_exc.FormulaSyntaxError(
                simulation_id=simulation_id,
                output_key=output_key,
                user_input=raw_expr,
                details=f"Error creating SymPy expression from transformed AST: {e}",
                source_file=source_file,
            ) from e

        if not isinstance(sympy_expr, sympy.Expr):
            raise formula_exc.FormulaSyntaxError(
                simulation_id=simulation_id,
                output_key=output_key,
                user_input=raw_expr,
                details=f"Expression must evaluate to a number, got {type(sympy_expr).__name__}.",
                source_file=source_file,
            )
        logger.debug(f"Preprocessed '{simulation_id}.{output_key}': '{raw_expr}' -> {sympy_expr}")
        return sympy_expr
