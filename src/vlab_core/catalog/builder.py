# src/vlab_core/catalog/builder.py
"""
Builds an immutable `SimulationRegistry` from a parsed simulation catalog.

The builder is the bridge between the YAML catalog and the runtime model:

1.  **Formula compilation:** every output expression of every entry is compiled into a
    `CompiledFormula` (the definition's `compute` rule). Scope per entry is the entry's
    variables, then its outputs, then the built-in and catalog constants.

2.  **Definition synthesis:** the IR records become frozen `SimulationDefinition`,
    `VariableDescriptor` and `OutputDescriptor` objects.

3.  **Top-level error handling:** any `DiagnosableError` raised while parsing or
    compiling is re-raised as one `ConfigurationError` carrying its diagnostic report,
    so a broken catalog fails startup with an actionable message.
"""
import logging
from pathlib import Path
from typing import List, Optional, Union

from ..constants import BUILTIN_FORMULA_CONSTANTS
from ..data_structures import OutputDescriptor, SimulationDefinition, VariableDescriptor
from ..errors import ConfigurationError, DiagnosableError, format_diagnostic_report
from ..formulas import FormulaCompiler
from ..registry import SimulationRegistry
from .parser import CatalogParser
from .raw_data import ParsedSimulationCatalog, ParsedSimulationData

logger = logging.getLogger(__name__)


class CatalogBuilder:
    """Turns simulation catalogs (files or parsed IR) into validated registries."""

    def __init__(self, parser: Optional[CatalogParser] = None):
        self._parser = parser or CatalogParser()

    def build_from_file(self, yaml_path: Union[str, Path]) -> SimulationRegistry:
        """Parses `yaml_path` and builds its registry; every failure is a `ConfigurationError`."""
        try:
            parsed_catalog = self._parser.parse(yaml_path)
        except DiagnosableError as e:
            raise ConfigurationError(e.get_diagnostic_report()) from e
        return self.build_registry(parsed_catalog)

    def build_registry(self, parsed_catalog: ParsedSimulationCatalog) -> SimulationRegistry:
        logger.info(f"--- Building '{parsed_catalog.lab}' definitions from {parsed_catalog.source_yaml_path.name} ---")
        try:
            definitions = self.build_definitions(parsed_catalog)
        except DiagnosableError as e:
            raise ConfigurationError(e.get_diagnostic_report()) from e
        except Exception as e:
            report = format_diagnostic_report(
                error_type=f"An Unexpected Error Occurred ({type(e).__name__})",
                details=f"The catalog builder encountered an unexpected internal error: {e}",
                suggestion="This may indicate a bug in the Virtual Lab core. Please review the traceback.",
                context={'source_file': parsed_catalog.source_yaml_path},
            )
            raise ConfigurationError(report) from e

        return SimulationRegistry.register(
            definitions,
            name=parsed_catalog.lab,
            source_file=str(parsed_catalog.source_yaml_path),
        )

    def build_definitions(self, parsed_catalog: ParsedSimulationCatalog) -> List[SimulationDefinition]:
        constants = {**BUILTIN_FORMULA_CONSTANTS, **parsed_catalog.constants}
        compiler = FormulaCompiler(constants)
        return [
            self._build_definition(sim_ir, compiler, parsed_catalog.source_yaml_path)
            for sim_ir in parsed_catalog.simulations
        ]

    def _build_definition(self, sim_ir: ParsedSimulationData, compiler: FormulaCompiler,
                          source_path: Path) -> SimulationDefinition:
        compute = compiler.compile(
            simulation_id=sim_ir.simulation_id,
            variable_keys=[var.key for var in sim_ir.variables],
            output_expressions=[(out.key, out.expression) for out in sim_ir.outputs],
            source_file=source_path,
        )
        return SimulationDefinition(
            id=sim_ir.simulation_id,
            category=sim_ir.category,
            name=sim_ir.name,
            description=sim_ir.description,
            variables=tuple(
                VariableDescriptor(
                    key=var.key, label=var.label, min=var.min, max=var.max,
                    default=var.default, unit=var.unit, step=var.step,
                )
                for var in sim_ir.variables
            ),
            outputs=tuple(
                OutputDescriptor(key=out.key, label=out.label, unit=out.unit)
                for out in sim_ir.outputs
            ),
            compute=compute,
            formula=sim_ir.formula,
        )
