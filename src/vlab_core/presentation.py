# src/vlab_core/presentation.py
"""
Display helpers for clients rendering simulation controls and results.

None of these are used by the evaluation engine: the engine accepts out-of-range
values and returns non-finite outputs untouched, and it is up to the presentation
layer to clamp slider input and to render NaN/inf.
"""
import logging
import math
import re

from .data_structures import VariableDescriptor

logger = logging.getLogger(__name__)

NON_FINITE_DISPLAY = "—"

_TRAILING_ZERO_FRACTION = re.compile(r"\.0+$")


def _exponential(value: float, digits: int) -> str:
    # '1.23e+04' -> '1.23e+4', the browser client's Number.toExponential spelling.
    mantissa, exponent = f"{value:.{digits}e}".split("e")
    exp = int(exponent)
    return f"{mantissa}e{'-' if exp < 0 else '+'}{abs(exp)}"


def format_value(value: float) -> str:
    """
    Formats an output for display.

    Non-finite values render as an em dash. Magnitudes of at least 1000 or below 0.001
    (zero included) use exponential notation with two decimals; everything else uses three decimals,
    dropping an all-zero fraction ('2.000' -> '2', but '1.500' stays).
    """
    value = float(value)
    if not math.isfinite(value):
        return NON_FINITE_DISPLAY
    if value == 0:
        value = 0.0  # -0.0 prints without a sign
    magnitude = abs(value)
    if magnitude >= 1000 or magnitude < 0.001:
        return _exponential(value, 2)
    return _TRAILING_ZERO_FRACTION.sub("", f"{value:.3f}")


def clamp_to_range(variable: VariableDescriptor, value: float) -> float:
    """Limits `value` to the variable's [min, max] range."""
    return min(variable.max, max(variable.min, float(value)))


def snap_to_step(variable: VariableDescriptor, value: float) -> float:
    """
    Moves `value` to the nearest point of the slider grid `min + k * step` (step 1
    when the variable declares none) and clamps the result to [min, max].
    """
    step = variable.step if variable.step and variable.step > 0 else 1.0
    steps = round((float(value) - variable.min) / step)
    snapped = variable.min + steps * step
    # Trim accumulated binary noise such as 0.30000000000000004.
    snapped = float(f"{snapped:.12g}")
    return clamp_to_range(variable, snapped)
