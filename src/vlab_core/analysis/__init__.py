# src/vlab_core/analysis/__init__.py
import logging
logger = logging.getLogger(__name__)

from .exceptions import (
    AnalysisError,
    InvalidAnalysisRequest,
    AnalysisConfigurationError,
    AnalysisTimeoutError,
    AnalysisTransportError,
    UpstreamStatusError,
)
from .service import (
    ReactionAnalysis,
    ReactionAnalysisService,
    build_prompt,
    split_analysis_text,
    extract_text,
    validate_reactant_names,
    FALLBACK_MODEL,
)

__all__ = [
    "AnalysisError",
    "InvalidAnalysisRequest",
    "AnalysisConfigurationError",
    "AnalysisTimeoutError",
    "AnalysisTransportError",
    "UpstreamStatusError",
    "ReactionAnalysis",
    "ReactionAnalysisService",
    "build_prompt",
    "split_analysis_text",
    "extract_text",
    "validate_reactant_names",
    "FALLBACK_MODEL",
]
