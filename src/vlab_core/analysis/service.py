# src/vlab_core/analysis/service.py
"""
Async proxy that asks a hosted generative-language model to describe a chemical reaction.

The service owns prompt construction, the upstream call and the split of the model's
free text into a "result" and an "analysis" part. The upstream model's content is
opaque: nothing here interprets it beyond that split.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import httpx

from ..config import DEFAULT_GEMINI_MODEL, AppSettings
from .exceptions import (
    AnalysisConfigurationError,
    AnalysisTimeoutError,
    AnalysisTransportError,
    InvalidAnalysisRequest,
    UpstreamStatusError,
)

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1"
FALLBACK_MODEL = DEFAULT_GEMINI_MODEL

NO_RESULT_TEXT = "No analysis available."
NO_ANALYSIS_TEXT = "No further analysis."

_ANALYSIS_MARKER = re.compile(r"analysis:", re.IGNORECASE)


@dataclass(frozen=True)
class ReactionAnalysis:
    result: str
    analysis: str
    model_used: str
    raw: Optional[Dict[str, Any]] = None


def build_prompt(reactant_names: Sequence[str]) -> str:
    return (
        f"Given the following chemicals: {', '.join(reactant_names)}, describe the reaction that occurs, "
        "the products, and a brief analysis of the process. If no reaction occurs, state so. "
        "Provide clear separation: Reaction:, Products:, Analysis:"
    )


def split_analysis_text(full_text: str) -> Tuple[str, str]:
    """Splits model output at the first 'Analysis:' (any case) into (result, analysis), with defaults for empty parts."""
    parts = _ANALYSIS_MARKER.split(full_text, maxsplit=1)
    result = parts[0].strip()
    analysis = parts[1].strip() if len(parts) > 1 else ""
    return result or NO_RESULT_TEXT, analysis or NO_ANALYSIS_TEXT


def extract_text(data: Any) -> str:
    """candidates[0].content.parts[0].text, or '' when the response has another shape."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text if isinstance(text, str) else ""


def validate_reactant_names(reactant_names: Any) -> Tuple[str, ...]:
    if not isinstance(reactant_names, (list, tuple)) or not reactant_names:
        raise InvalidAnalysisRequest("reactantNames must be a non-empty array of strings")
    if not all(isinstance(name, str) for name in reactant_names):
        raise InvalidAnalysisRequest("Each reactant name must be a string")
    return tuple(reactant_names)


class ReactionAnalysisService:
    """
    Calls the generateContent endpoint of the configured model.

    Pass an `httpx.AsyncClient` to share a connection pool (or to inject a mock
    transport); otherwise the service creates and owns one. Use as an async context
    manager, or call `aclose()`, to release an owned client.
    """

    def __init__(self, settings: AppSettings, client: Optional[httpx.AsyncClient] = None,
                 base_url: str = GEMINI_BASE_URL):
        self.settings = settings
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.settings.analysis_timeout))
            logger.debug("ReactionAnalysisService HTTP client started")
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            logger.debug("ReactionAnalysisService HTTP client closed")

    def endpoint_for(self, model: str) -> str:
        return f"{self.base_url}/models/{model}:generateContent"

    async def _post(self, model: str, prompt: str) -> Tuple[httpx.Response, Any]:
        try:
            response = await self._get_client().post(
                self.endpoint_for(model),
                params={"key": self.settings.gemini_api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=self.settings.analysis_timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Gemini request to model '{model}' timed out after {self.settings.analysis_timeout}s")
            raise AnalysisTimeoutError("Gemini request timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Transport error calling Gemini model '{model}': {e}")
            raise AnalysisTransportError("Server exception calling Gemini", details=str(e)) from e
        try:
            data = response.json()
        except ValueError:
            data = {}
        return response, data

    async def analyze(self, reactant_names: Sequence[str], meta: Optional[Dict[str, Any]] = None) -> ReactionAnalysis:
        """
        Asks the model about `reactant_names` (which may include a trailing
        "__CONTEXT__ ..." line; `meta` is accepted but only logged).

        Raises:
            InvalidAnalysisRequest: `reactant_names` is not a non-empty list of strings.
            AnalysisConfigurationError: no API key is configured.
            AnalysisTimeoutError: the upstream call exceeded the configured timeout.
            UpstreamStatusError: the upstream answered with a non-2xx status.
            AnalysisTransportError: any other transport failure.
        """
        names = validate_reactant_names(reactant_names)
        if not self.settings.has_api_key:
            raise AnalysisConfigurationError("GEMINI_API_KEY missing in environment")
        if meta:
            logger.debug(f"Analysis request meta: {meta}")

        prompt = build_prompt(names)
        model = self.settings.gemini_model
        response, data = await self._post(model, prompt)

        if not response.is_success:
            logger.error(f"Gemini API error status {response.status_code}: {data}")
            if (response.status_code == 404 and not self.settings.model_explicit
                    and model != FALLBACK_MODEL):
                logger.info(f"Attempting fallback model: {FALLBACK_MODEL}")
                model = FALLBACK_MODEL
                response, data = await self._post(model, prompt)
                if not response.is_success:
                    raise UpstreamStatusError(response.status_code, data, fallback=True)
            else:
                raise UpstreamStatusError(response.status_code, data)

        result, analysis = split_analysis_text(extract_text(data))
        return ReactionAnalysis(
            result=result,
            analysis=analysis,
            model_used=model,
            raw=data if self.settings.development else None,
        )
