# src/vlab_core/catalog/parser.py
import keyword
import logging
import re
import string
from pathlib import Path
from typing import Any, Dict, List, Union

import cerberus
import yaml

from .raw_data import (
    ParsedChemicalData,
    ParsedChemistryCatalog,
    ParsedOutputData,
    ParsedReactionData,
    ParsedSimulationCatalog,
    ParsedSimulationData,
    ParsedVariableData,
)
from .exceptions import CatalogParsingError, CatalogSchemaError

logger = logging.getLogger(__name__)

ID_REGEX_FRAGMENT = r"[a-zA-Z_][a-zA-Z0-9_]*"
ID_REGEX = f"^{ID_REGEX_FRAGMENT}$"
ALLOWED_ID_CHARS = set(string.ascii_letters + string.digits + "_")


class EnhancedValidator(cerberus.Validator):
    """Custom Cerberus validator enforcing the catalog naming conventions."""
    def __init__(self, *args, **kwargs):
        super(EnhancedValidator, self).__init__(*args, **kwargs)
        self.rules['id_regex'] = {'schema': {'type': 'boolean'}}
        self.rules['not_keyword'] = {'schema': {'type': 'boolean'}}
        self.rules['unique_elements_by_key'] = {'schema': {'type': 'string'}}

    def _validate_id_regex(self, constraint: bool, field: str, value: Any):
        if not constraint: return
        if not isinstance(value, str):
            self._error(field, "must be a string to be validated by id_regex.")
            return

        if not re.match(ID_REGEX, value):
            invalid_chars = sorted(list(set(value) - ALLOWED_ID_CHARS))
            message = (
                f"Identifier '{value}' is invalid. Identifiers must start with a letter or underscore, "
                "and can only contain letters, numbers, and underscores. "
                f"This identifier contains the following forbidden character(s): {invalid_chars}"
            )
            self._error(field, message)

    def _validate_not_keyword(self, constraint: bool, field: str, value: Any):
        if constraint and isinstance(value, str) and keyword.iskeyword(value):
            self._error(field, f"Identifier '{value}' is a reserved Python keyword and cannot be used in expressions.")

    def _validate_unique_elements_by_key(self, key_for_uniqueness: str, field: str, value: List[Dict]):
        """
        Validates that all dictionaries in a list have a unique value for a given key.
        The rule's arguments are validated against this schema:
        {'type': 'string'}
        """
        if not isinstance(value, list):
            return

        seen_keys = set()
        duplicates = []
        for item in value:
            if not isinstance(item, dict):
                continue

            item_key = item.get(key_for_uniqueness)
            if item_key is not None:
                if item_key in seen_keys:
                    duplicates.append(item_key)
                else:
                    seen_keys.add(item_key)

        if duplicates:
            unique_duplicates = sorted(set(map(str, duplicates)))
            self._error(field, f"Duplicate values found for key '{key_for_uniqueness}': {unique_duplicates}")


def _load_yaml(source: Path) -> Dict[str, Any]:
    """Loads and performs basic sanity checks on a catalog YAML file."""
    if not source.is_file():
        raise CatalogParsingError(details=f"Catalog file not found at path: {source}", file_path=source)
    try:
        with source.open("r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
        if content is None:
            raise CatalogParsingError(details="The YAML file is empty or contains no valid content.", file_path=source)
        if not isinstance(content, dict):
            raise CatalogParsingError(details="The root of the YAML file must be a dictionary (mapping).", file_path=source)
        return content
    except PermissionError as e:
        raise CatalogParsingError(details=f"Permission denied when trying to read file: {e}", file_path=source) from e
    except yaml.YAMLError as e:
        raise CatalogParsingError(details=f"Invalid YAML syntax: {e}", file_path=source) from e


def _optional_float(value: Any):
    return None if value is None else float(value)


class CatalogParser:
    """
    Parses and validates a simulation catalog YAML file into a `ParsedSimulationCatalog`.
    Expressions are carried through as text; compiling them is the builder's job.
    """
    _key_rule = {"type": "string", "required": True, "empty": False, "id_regex": True, "not_keyword": True}
    _text_rule = {"type": "string", "required": True, "empty": False}
    _unit_rule = {"type": "string", "required": False, "nullable": True}

    _variable_schema = {
        "key": _key_rule,
        "label": _text_rule,
        "unit": _unit_rule,
        "min": {"type": "number", "required": True},
        "max": {"type": "number", "required": True},
        "default": {"type": "number", "required": True},
        "step": {"type": "number", "required": False, "nullable": True},
    }

    _output_schema = {
        "key": _key_rule,
        "label": _text_rule,
        "unit": _unit_rule,
        "expression": {"type": ["string", "number"], "required": True, "empty": False},
    }

    _simulation_schema = {
        "id": {"type": "string", "required": True, "empty": False, "id_regex": True},
        "category": _text_rule,
        "name": _text_rule,
        "description": {"type": "string", "required": False, "default": ""},
        "formula": {"type": "string", "required": False, "nullable": True},
        "variables": {"type": "list", "required": True, "unique_elements_by_key": "key",
                      "schema": {"type": "dict", "schema": _variable_schema}},
        "outputs": {"type": "list", "required": True, "minlength": 1, "unique_elements_by_key": "key",
                    "schema": {"type": "dict", "schema": _output_schema}},
    }

    _schema = {
        "lab": {"type": "string", "required": True, "empty": False, "id_regex": True},
        "constants": {"type": "dict", "required": False,
                      "keysrules": {"type": "string", "id_regex": True, "not_keyword": True},
                      "valuesrules": {"type": "number"}},
        "simulations": {"type": "list", "required": True, "minlength": 1, "unique_elements_by_key": "id",
                        "schema": {"type": "dict", "schema": _simulation_schema}},
    }

    def __init__(self):
        self._validator = EnhancedValidator(self._schema)
        self._validator.allow_unknown = False
        logger.debug("CatalogParser initialized with strict structural validation rules.")

    def parse(self, yaml_path: Union[str, Path]) -> ParsedSimulationCatalog:
        resolved_path = Path(yaml_path).resolve()
        logger.info(f"Parsing simulation catalog: {resolved_path}")

        yaml_content = _load_yaml(resolved_path)
        if not self._validator.validate(yaml_content):
            raise CatalogSchemaError(self._validator.errors, resolved_path)
        validated_data = self._validator.document

        simulations: List[ParsedSimulationData] = []
        for sim_raw in validated_data["simulations"]:
            variables = [
                ParsedVariableData(
                    key=var_raw["key"],
                    label=var_raw["label"],
                    min=float(var_raw["min"]),
                    max=float(var_raw["max"]),
                    default=float(var_raw["default"]),
                    unit=var_raw.get("unit"),
                    step=_optional_float(var_raw.get("step")),
                )
                for var_raw in sim_raw["variables"]
            ]
            outputs = [
                ParsedOutputData(
                    key=out_raw["key"],
                    label=out_raw["label"],
                    expression=out_raw["expression"],
                    unit=out_raw.get("unit"),
                )
                for out_raw in sim_raw["outputs"]
            ]
            simulations.append(ParsedSimulationData(
                simulation_id=sim_raw["id"],
                category=sim_raw["category"],
                name=sim_raw["name"],
                description=sim_raw.get("description", ""),
                variables=variables,
                outputs=outputs,
                formula=sim_raw.get("formula"),
            ))

        constants = {name: float(value) for name, value in validated_data.get("constants", {}).items()}
        logger.debug(f"Parsed {len(simulations)} simulation(s) and {len(constants)} constant(s) from {resolved_path.name}.")
        return ParsedSimulationCatalog(
            lab=validated_data["lab"],
            source_yaml_path=resolved_path,
            simulations=simulations,
            constants=constants,
        )


class ChemistryCatalogParser:
    """Parses the chemistry lab's chemical list and known reaction pairs."""
    _chemical_schema = {
        "id": {"type": "integer", "required": True, "min": 1},
        "name": {"type": "string", "required": True, "empty": False},
        "formula": {"type": "string", "required": True, "empty": False},
        "description": {"type": "string", "required": False, "default": ""},
    }

    _reaction_schema = {
        "reactants": {"type": "list", "required": True, "minlength": 2, "maxlength": 2,
                      "schema": {"type": "integer", "min": 1}},
        "description": {"type": "string", "required": True, "empty": False},
        "products": {"type": "list", "required": False, "default": [], "schema": {"type": "integer", "min": 1}},
    }

    _schema = {
        "lab": {"type": "string", "required": True, "allowed": ["chemistry"]},
        "chemicals": {"type": "list", "required": True, "minlength": 1, "unique_elements_by_key": "id",
                      "schema": {"type": "dict", "schema": _chemical_schema}},
        "reactions": {"type": "list", "required": False, "default": [],
                      "schema": {"type": "dict", "schema": _reaction_schema}},
        "default_reaction": {"type": "string", "required": True, "empty": False},
    }

    def __init__(self):
        self._validator = EnhancedValidator(self._schema)
        self._validator.allow_unknown = False

    def parse(self, yaml_path: Union[str, Path]) -> ParsedChemistryCatalog:
        resolved_path = Path(yaml_path).resolve()
        logger.info(f"Parsing chemistry catalog: {resolved_path}")

        yaml_content = _load_yaml(resolved_path)
        if not self._validator.validate(yaml_content):
            raise CatalogSchemaError(self._validator.errors, resolved_path)
        validated_data = self._validator.document

        chemicals = [
            ParsedChemicalData(
                chemical_id=chem_raw["id"],
                name=chem_raw["name"],
                formula=chem_raw["formula"],
                description=chem_raw.get("description", ""),
            )
            for chem_raw in validated_data["chemicals"]
        ]
        known_ids = {chem.chemical_id for chem in chemicals}
        reactions = []
        for index, reaction_raw in enumerate(validated_data.get("reactions", [])):
            referenced = list(reaction_raw["reactants"]) + list(reaction_raw.get("products", []))
            unknown = sorted(set(referenced) - known_ids)
            if unknown:
                raise CatalogSchemaError(
                    {"reactions": [{index: [f"References unknown chemical id(s): {unknown}"]}]},
                    resolved_path,
                )
            reactions.append(ParsedReactionData(
                reactants=tuple(reaction_raw["reactants"]),
                description=reaction_raw["description"],
                products=list(reaction_raw.get("products", [])),
            ))

        return ParsedChemistryCatalog(
            source_yaml_path=resolved_path,
            chemicals=chemicals,
            reactions=reactions,
            default_reaction=validated_data["default_reaction"],
        )
