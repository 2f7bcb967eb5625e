# src/vlab_core/formulas/formula.py
import logging
from collections import ChainMap
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import networkx as nx
import numpy as np
import sympy

from .exceptions import CircularFormulaDependencyError, FormulaError, FormulaSyntaxError
from .preprocessor import ExpressionPreprocessor

logger = logging.getLogger(__name__)


class CompiledFormula:
    """
    The compute rule of a catalog definition: a pure callable mapping a variable
    assignment to a fresh dict holding every declared output as a Python float.

    Every output is compiled to a closed-form NumPy function of the variables alone
    (dependencies on other outputs are substituted at compile time). Inputs are
    evaluated as float64 with floating-point warnings suppressed, so division by zero
    yields +/-inf and invalid operations yield NaN instead of raising.
    """

    def __init__(self, simulation_id: str, variable_keys: Sequence[str],
                 expressions: Dict[str, sympy.Expr], functions: Dict[str, Callable]):
        self.simulation_id = simulation_id
        self.variable_keys: Tuple[str, ...] = tuple(variable_keys)
        self.output_keys: Tuple[str, ...] = tuple(expressions.keys())
        self.expressions = dict(expressions)
        self._functions = dict(functions)

    def __call__(self, assignment: Mapping[str, float]) -> Dict[str, float]:
        args = [np.float64(assignment[key]) for key in self.variable_keys]
        with np.errstate(all='ignore'):
            return {key: float(self._functions[key](*args)) for key in self.output_keys}

    def __repr__(self) -> str:
        return f"CompiledFormula({self.simulation_id!r}, outputs={list(self.output_keys)})"


class FormulaCompiler:
    """
    Compiles the output expressions of one definition into a `CompiledFormula`.

    Identifiers resolve in order: variable keys, then output keys, then constants.
    Output-to-output references form a dependency graph that must be acyclic; outputs are
    resolved in topological order.
    """

    def __init__(self, constants: Optional[Mapping[str, float]] = None):
        self.constants: Dict[str, float] = dict(constants or {})
        self._preprocessor = ExpressionPreprocessor()

    def compile(
        self,
        simulation_id: str,
        variable_keys: Sequence[str],
        output_expressions: Sequence[Tuple[str, str]],
        source_file: Optional[Path] = None,
    ) -> CompiledFormula:
        variable_symbols = {key: sympy.Symbol(f"in_{key}", real=True) for key in variable_keys}
        output_symbols = {key: sympy.Symbol(f"out_{key}", real=True) for key, _ in output_expressions}
        constant_values = {name: sympy.Float(value) for name, value in self.constants.items()}
        scope = ChainMap(variable_symbols, output_symbols, constant_values)

        raw_exprs: Dict[str, sympy.Expr] = {}
        for output_key, raw_expr in output_expressions:
            raw_exprs[output_key] = self._preprocessor.preprocess(
                simulation_id, output_key, str(raw_expr), scope, source_file
            )

        order = self._evaluation_order(simulation_id, raw_exprs, output_symbols, source_file)

        symbol_to_output = {symbol: key for key, symbol in output_symbols.items()}
        resolved: Dict[str, sympy.Expr] = {}
        for output_key in order:
            substitutions = {
                symbol: resolved[symbol_to_output[symbol]]
                for symbol in raw_exprs[output_key].free_symbols
                if symbol in symbol_to_output
            }
            resolved[output_key] = raw_exprs[output_key].xreplace(substitutions)

        arg_symbols = [variable_symbols[key] for key in variable_keys]
        functions: Dict[str, Callable] = {}
        expressions: Dict[str, sympy.Expr] = {}
        for output_key, _ in output_expressions:
            expr = resolved[output_key]
            try:
                functions[output_key] = sympy.lambdify(arg_symbols, expr, modules="numpy", dummify=True)
            except Exception as e:
                raise FormulaSyntaxError(
                    simulation_id=simulation_id,
                    output_key=output_key,
                    user_input=str(dict(output_expressions)[output_key]),
                    details=f"Compilation with lambdify failed: {type(e).__name__} - {e}",
                    source_file=source_file,
                ) from e
            expressions[output_key] = expr

        logger.debug(f"Compiled {len(functions)} output expression(s) for '{simulation_id}'.")
        return CompiledFormula(simulation_id, variable_keys, expressions, functions)

    def _evaluation_order(
        self,
        simulation_id: str,
        raw_exprs: Dict[str, sympy.Expr],
        output_symbols: Dict[str, sympy.Symbol],
        source_file: Optional[Path],
    ) -> List[str]:
        graph = nx.DiGraph()
        graph.add_nodes_from(raw_exprs.keys())
        symbol_to_output = {symbol: key for key, symbol in output_symbols.items()}
        for output_key, expr in raw_exprs.items():
            for symbol in expr.free_symbols:
                if symbol in symbol_to_output:
                    graph.add_edge(symbol_to_output[symbol], output_key)

        try:
            cycles = list(nx.simple_cycles(graph))
        except nx.NetworkXError as e:
            raise FormulaError(f"NetworkX error during cycle check: {e}") from e
        if cycles:
            raise CircularFormulaDependencyError(
                simulation_id=simulation_id, cycle=sorted(cycles, key=len)[0], source_file=source_file
            )
        return list(nx.topological_sort(graph))
