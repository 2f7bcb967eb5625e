# src/vlab_core/chemistry/experiment.py
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Sequence

from .mixture import Mixture

logger = logging.getLogger(__name__)

VISIBLE_REACTION_SCORE = 100
NO_REACTION_SCORE = 50


@dataclass(frozen=True)
class ChemistryExperiment:
    """A saved chemistry lab run, recorded in the same shape the browser client stores."""
    chemicals: Sequence[str]
    temperature: float
    ph: float
    result: str
    timestamp: float
    score: int

    def __post_init__(self):
        object.__setattr__(self, 'chemicals', tuple(self.chemicals))

    @classmethod
    def from_mixture(cls, mixture: Mixture, temperature: float, result: str, visible: bool,
                     clock: Callable[[], float] = time.time) -> 'ChemistryExperiment':
        return cls(
            chemicals=mixture.names,
            temperature=float(temperature),
            ph=mixture.estimate_ph(),
            result=result,
            timestamp=clock(),
            score=VISIBLE_REACTION_SCORE if visible else NO_REACTION_SCORE,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "chemicals": list(self.chemicals),
            "temperature": self.temperature,
            "ph": self.ph,
            "result": self.result,
            "timestamp": int(round(self.timestamp * 1000)),
            "score": self.score,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'ChemistryExperiment':
        try:
            chemicals = record["chemicals"]
            if isinstance(chemicals, str) or not isinstance(chemicals, Sequence):
                raise TypeError(f"'chemicals' must be a list, got {type(chemicals).__name__}")
            return cls(
                chemicals=[str(name) for name in chemicals],
                temperature=float(record["temperature"]),
                ph=float(record["ph"]),
                result=str(record["result"]),
                timestamp=float(record["timestamp"]) / 1000.0,
                score=int(record["score"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed chemistry experiment record: {e!r}") from e
