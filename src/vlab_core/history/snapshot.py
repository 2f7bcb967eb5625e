# src/vlab_core/history/snapshot.py
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

EXPERIMENT_TYPE_PREFIX = "sim:"


def _encode_number(value: float) -> Optional[float]:
    """JSON has no NaN/Infinity; non-finite values are stored as null."""
    value = float(value)
    return value if math.isfinite(value) else None


def _decode_number(value: Any) -> float:
    return math.nan if value is None else float(value)


@dataclass(frozen=True)
class Snapshot:
    """
    One recorded evaluation: which definition, the variable and output assignments at
    that moment, and when (seconds since the epoch). Opaque to the engine.
    """
    definition_id: str
    variables: Mapping[str, float]
    outputs: Mapping[str, float]
    timestamp: float
    score: Optional[int] = None

    def __post_init__(self):
        # Copy so later changes to the caller's mappings cannot leak into history.
        object.__setattr__(self, 'variables', {k: float(v) for k, v in self.variables.items()})
        object.__setattr__(self, 'outputs', {k: float(v) for k, v in self.outputs.items()})

    def to_record(self) -> Dict[str, Any]:
        """The JSON-compatible record shape used by the browser client's history lists."""
        record: Dict[str, Any] = {
            "experimentType": f"{EXPERIMENT_TYPE_PREFIX}{self.definition_id}",
            "data": {
                "vars": {k: _encode_number(v) for k, v in self.variables.items()},
                "outputs": {k: _encode_number(v) for k, v in self.outputs.items()},
            },
            "timestamp": int(round(self.timestamp * 1000)),
        }
        if self.score is not None:
            record["score"] = self.score
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Snapshot':
        """
        Inverse of `to_record`.

        Raises:
            ValueError: if the record does not have the expected shape.
        """
        try:
            experiment_type = str(record["experimentType"])
            data = record["data"]
            timestamp_ms = float(record["timestamp"])
            variables = {k: _decode_number(v) for k, v in data["vars"].items()}
            outputs = {k: _decode_number(v) for k, v in data["outputs"].items()}
            score = record.get("score")
            score = int(score) if score is not None else None
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise ValueError(f"Malformed snapshot record: {e!r}") from e

        definition_id = experiment_type
        if experiment_type.startswith(EXPERIMENT_TYPE_PREFIX):
            definition_id = experiment_type[len(EXPERIMENT_TYPE_PREFIX):]
        return cls(
            definition_id=definition_id,
            variables=variables,
            outputs=outputs,
            timestamp=timestamp_ms / 1000.0,
            score=score,
        )
