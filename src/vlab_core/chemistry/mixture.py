# src/vlab_core/chemistry/mixture.py
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .chemicals import NEUTRAL_PH, Chemical

logger = logging.getLogger(__name__)

DEFAULT_VOLUME_ML = 10.0
MIN_PH = 1.0
MAX_PH = 14.0

CONTEXT_MARKER = "__CONTEXT__"


def js_number(value: float) -> str:
    """Renders a number the way the browser client interpolates it ('10', not '10.0')."""
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


@dataclass(frozen=True)
class MixtureEntry:
    chemical: Chemical
    volume_ml: float

    @property
    def label(self) -> str:
        return f"{self.chemical.name} ({js_number(self.volume_ml)}ml)"


class Mixture:
    """The chemicals poured into the beaker, in the order they were added."""

    def __init__(self):
        self._entries: List[MixtureEntry] = []

    def add(self, chemical: Chemical, volume: float = DEFAULT_VOLUME_ML) -> MixtureEntry:
        volume = float(volume)
        if not volume > 0:
            raise ValueError(f"Volume must be positive, got {volume}.")
        entry = MixtureEntry(chemical, volume)
        self._entries.append(entry)
        logger.debug(f"Added {entry.label} to mixture; {len(self._entries)} entr(y/ies).")
        return entry

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> Tuple[MixtureEntry, ...]:
        return tuple(self._entries)

    @property
    def chemical_ids(self) -> Tuple[int, ...]:
        return tuple(entry.chemical.id for entry in self._entries)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(entry.chemical.name for entry in self._entries)

    def estimate_ph(self) -> float:
        """
        Acid/base tally over the mixture: each acid adds (7 - pH) * concentration, each
        base adds (pH - 7) * concentration, and the stronger side moves the result away
        from 7 by the difference, limited to [1, 14]. Volumes are not weighted.
        """
        if not self._entries:
            return NEUTRAL_PH
        acid_strength = 0.0
        base_strength = 0.0
        for entry in self._entries:
            chemical = entry.chemical
            if chemical.is_acid:
                acid_strength += (NEUTRAL_PH - chemical.ph) * chemical.concentration
            elif chemical.is_base:
                base_strength += (chemical.ph - NEUTRAL_PH) * chemical.concentration
        if acid_strength > base_strength:
            return max(MIN_PH, NEUTRAL_PH - (acid_strength - base_strength))
        if base_strength > acid_strength:
            return min(MAX_PH, NEUTRAL_PH + (base_strength - acid_strength))
        return NEUTRAL_PH

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class ReactionContext:
    """Bench conditions sent along with a reaction analysis request."""
    temperature_c: Optional[float] = None
    heating: Optional[bool] = None
    ph: Optional[float] = None
    notes: Optional[str] = None
    volumes: Dict[str, float] = field(default_factory=dict)

    def context_line(self) -> str:
        fragments = []
        if self.temperature_c is not None:
            fragments.append(f"Temperature={js_number(self.temperature_c)}C")
        if self.heating is not None:
            fragments.append(f"Heating={'Yes' if self.heating else 'No'}")
        if self.ph is not None:
            fragments.append(f"pH={self.ph:.2f}")
        if self.notes:
            fragments.append(f"Notes={self.notes}")
        return f"{CONTEXT_MARKER} {'; '.join(fragments)}" if fragments else ""

    def to_meta(self) -> Dict[str, Any]:
        meta: Dict[str, Any] = {}
        if self.temperature_c is not None:
            meta["temperatureC"] = self.temperature_c
        if self.heating is not None:
            meta["heating"] = self.heating
        if self.ph is not None:
            meta["ph"] = self.ph
        if self.notes:
            meta["notes"] = self.notes
        if self.volumes:
            meta["volumes"] = dict(self.volumes)
        return meta


def build_analysis_request(mixture: Mixture, context: Optional[ReactionContext] = None) -> Dict[str, Any]:
    """
    Builds the body of a reaction analysis request: one "<name> (<volume>ml)" entry per
    mixture component and, when `context` carries any field, a trailing
    "__CONTEXT__ ..." line plus the structured `meta` object.
    """
    reactant_names = [entry.label for entry in mixture.entries]
    if context is None:
        return {"reactantNames": reactant_names}
    line = context.context_line()
    if line:
        reactant_names.append(line)
    return {"reactantNames": reactant_names, "meta": context.to_meta()}
