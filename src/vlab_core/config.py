# --- src/vlab_core/config.py ---
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .constants import HISTORY_CAPACITY

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_ANALYSIS_TIMEOUT = 20.0
DEFAULT_HISTORY_DIR = "~/.vlab/history"
DEFAULT_PORT = 5001

_TRUTHY = {"1", "true", "yes", "on"}


class SettingsError(ValueError):
    """Raised when an environment variable holds a value of the wrong type or range."""
    pass


def _read_float(env: Mapping[str, str], name: str, default: float, minimum: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise SettingsError(f"{name} must be a number, got '{raw}'.") from e
    if not value > minimum:
        raise SettingsError(f"{name} must be greater than {minimum}, got {value}.")
    return value


def _read_int(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise SettingsError(f"{name} must be an integer, got '{raw}'.") from e
    if value < minimum:
        raise SettingsError(f"{name} must be at least {minimum}, got {value}.")
    return value


@dataclass(frozen=True)
class AppSettings:
    """Runtime settings of the analysis proxy and the web app."""
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    # False when the model is the built-in default; only then may a 404 fall back to it.
    model_explicit: bool = False
    analysis_timeout: float = DEFAULT_ANALYSIS_TIMEOUT
    history_dir: Path = Path(DEFAULT_HISTORY_DIR).expanduser()
    history_capacity: int = HISTORY_CAPACITY
    port: int = DEFAULT_PORT
    development: bool = False

    @property
    def has_api_key(self) -> bool:
        return bool(self.gemini_api_key)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AppSettings":
        """
        Reads settings from `env` (defaults to `os.environ`).

        Raises:
            SettingsError: if a numeric setting cannot be parsed or is out of range.
        """
        env = os.environ if env is None else env
        model = (env.get("GEMINI_MODEL") or "").strip()
        settings = cls(
            gemini_api_key=env.get("GEMINI_API_KEY") or None,
            gemini_model=model or DEFAULT_GEMINI_MODEL,
            model_explicit=bool(model),
            analysis_timeout=_read_float(env, "VLAB_ANALYSIS_TIMEOUT", DEFAULT_ANALYSIS_TIMEOUT, 0.0),
            history_dir=Path(env.get("VLAB_HISTORY_DIR") or DEFAULT_HISTORY_DIR).expanduser(),
            history_capacity=_read_int(env, "VLAB_HISTORY_CAPACITY", HISTORY_CAPACITY, 1),
            port=_read_int(env, "PORT", DEFAULT_PORT, 1),
            development=(env.get("VLAB_DEVELOPMENT") or "").strip().lower() in _TRUTHY,
        )
        logger.debug(
            f"Settings loaded: model={settings.gemini_model} (explicit={settings.model_explicit}), "
            f"has_key={settings.has_api_key}, timeout={settings.analysis_timeout}s, port={settings.port}"
        )
        return settings
