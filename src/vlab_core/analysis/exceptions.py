# src/vlab_core/analysis/exceptions.py
"""
Errors raised by the reaction analysis proxy.

Each error knows the HTTP status the web layer answers with and the JSON body it
sends (`to_payload`), so routes translate them without inspecting the error type.
"""
from typing import Any, Dict, Optional

from ..errors import DiagnosableError, format_diagnostic_report


class AnalysisError(DiagnosableError):
    """Base class for reaction analysis failures."""
    status_code: int = 500
    suggestion: str = "Check the analysis service logs for the upstream response."

    def __init__(self, message: str, details: Any = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self):
        return self.message

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload

    def get_diagnostic_report(self) -> str:
        details = self.message if self.details is None else f"{self.message}\n{self.details}"
        return format_diagnostic_report(
            error_type=f"Reaction Analysis Error (HTTP {self.status_code})",
            details=details,
            suggestion=self.suggestion,
            context={},
        )


class InvalidAnalysisRequest(AnalysisError):
    status_code = 400
    suggestion = "Send 'reactantNames' as a non-empty JSON array of strings."


class AnalysisConfigurationError(AnalysisError):
    status_code = 500
    suggestion = "Set the GEMINI_API_KEY environment variable and restart the server."


class AnalysisTimeoutError(AnalysisError):
    status_code = 504
    suggestion = "Retry later or raise VLAB_ANALYSIS_TIMEOUT."


class AnalysisTransportError(AnalysisError):
    status_code = 500
    suggestion = "Check network connectivity to the upstream API."


class UpstreamStatusError(AnalysisError):
    """The upstream API answered with a non-2xx status; the proxy answers with the same status."""
    suggestion = "Check the API key and GEMINI_MODEL; a 404 usually means the model name does not exist."

    def __init__(self, status: int, details: Any = None, fallback: bool = False):
        message = "Gemini API request failed (fallback)" if fallback else "Gemini API request failed"
        super().__init__(message, details)
        self.status_code = status
        self.fallback = fallback

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "status": self.status_code, "details": self.details}
