# tests/conftest.py
import textwrap
from pathlib import Path

import pytest

from vlab_core import (
    SimulationDefinition, VariableDescriptor, OutputDescriptor,
    SimulationRegistry, load_lab_registry,
)
from vlab_core.constants import BUILTIN_FORMULA_CONSTANTS
from vlab_core.formulas import FormulaCompiler
from vlab_core.chemistry import load_chemical_catalog


def make_definition(sim_id="t01", category="Energy", name="Kinetic Energy",
                    description="KE = 1/2 m v^2", variables=None, outputs=None, compute=None):
    """
    Builds a SimulationDefinition directly from Python values.
    `outputs` is a list of (key, expression) pairs compiled with the built-in constants unless
    an explicit `compute` callable is given.
    """
    if variables is None:
        variables = [
            VariableDescriptor(key="m", label="Mass", min=0.0, max=200.0, default=10.0, unit="kg"),
            VariableDescriptor(key="v", label="Velocity", min=0.0, max=100.0, default=15.0, unit="m/s"),
        ]
    if outputs is None:
        outputs = [("KE", "0.5*m*v*v")]
    if compute is None:
        compute = FormulaCompiler(BUILTIN_FORMULA_CONSTANTS).compile(sim_id, [v.key for v in variables], outputs)
    return SimulationDefinition(
        id=sim_id,
        category=category,
        name=name,
        description=description,
        variables=tuple(variables),
        outputs=tuple(OutputDescriptor(key=key, label=key) for key, _ in outputs),
        compute=compute,
    )


@pytest.fixture
def kinetic_energy_definition():
    return make_definition()


@pytest.fixture
def small_registry():
    """Three definitions across two categories, in a known order."""
    return SimulationRegistry.register([
        make_definition("k01", category="Kinematics", name="Uniform Motion",
                        description="Distance travelled at constant speed",
                        variables=[
                            VariableDescriptor(key="v", label="Speed", min=0.0, max=50.0, default=5.0),
                            VariableDescriptor(key="t", label="Time", min=0.0, max=60.0, default=4.0),
                        ],
                        outputs=[("d", "v*t")]),
        make_definition("e01"),
        make_definition("k02", category="Kinematics", name="Free Fall",
                        description="Speed after falling from rest",
                        variables=[VariableDescriptor(key="t", label="Time", min=0.0, max=10.0, default=2.0)],
                        outputs=[("vf", "g*t")]),
    ], name="small")


@pytest.fixture
def write_catalog(tmp_path):
    """Returns a function writing dedented YAML text to a catalog file under tmp_path."""
    def _write(yaml_text: str, filename: str = "catalog.yaml") -> Path:
        path = tmp_path / filename
        path.write_text(textwrap.dedent(yaml_text), encoding="utf-8")
        return path
    return _write


@pytest.fixture(scope="session")
def physics_registry():
    return load_lab_registry("physics")


@pytest.fixture(scope="session")
def biology_registry():
    return load_lab_registry("biology")


@pytest.fixture(scope="session")
def chemical_catalog():
    return load_chemical_catalog()


@pytest.fixture
def fixed_clock():
    return lambda: 1_700_000_000.0
