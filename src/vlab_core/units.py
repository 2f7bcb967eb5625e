# --- src/vlab_core/units.py ---
import logging
from typing import Optional

import pint

logger = logging.getLogger(__name__)
ureg = pint.UnitRegistry()
Quantity = ureg.Quantity
logger.info("Pint Unit Registry initialized.")


# Counting units used by the biology catalog.
ureg.define("individual = [population] = indiv")

# Display spellings that pint cannot parse as written.
# Order matters: the negative exponents must be rewritten before the bare ones.
_DISPLAY_ALIASES = {
    "Ω": "ohm",
    "°C": "degC",
    "µ": "u",
    "μ": "u",
    "⁻¹": "**-1",
    "⁻²": "**-2",
    "²": "**2",
    "³": "**3",
    "·": "*",
    "^": "**",
}


def parse_display_unit(unit_str: Optional[str]) -> Optional[pint.Unit]:
    """
    Interprets a catalog display unit (e.g. 'm/s^2', 'Ω', 'µM/s') as a pint unit.

    Returns None when the string is empty or not a recognisable unit. Display units
    are informational only, so callers treat None as "unknown", never as an error.
    """
    if not unit_str or not unit_str.strip():
        return None
    normalized = unit_str.strip()
    for display, canonical in _DISPLAY_ALIASES.items():
        normalized = normalized.replace(display, canonical)
    try:
        return ureg.parse_units(normalized)
    except Exception as e:
        logger.debug(f"Display unit '{unit_str}' is not a pint unit: {e}")
        return None
