# src/vlab_core/api/routers/gemini.py
"""Reaction analysis proxy endpoint, kept wire-compatible with the browser client."""
import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from ...analysis import AnalysisError
from ..context import AppContext

logger = logging.getLogger(__name__)


def setup_gemini_router(context: AppContext) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["analysis"])

    @router.post("/gemini")
    async def analyze_reaction(payload: Any = Body(default=None)) -> JSONResponse:
        """Forwards reactantNames to the analysis service and returns {result, analysis, raw?}."""
        body = payload if isinstance(payload, dict) else {}
        meta = body.get("meta") if isinstance(body.get("meta"), dict) else None
        try:
            analysis = await context.get_analysis_service().analyze(body.get("reactantNames"), meta=meta)
        except AnalysisError as e:
            logger.warning(f"Reaction analysis failed with HTTP {e.status_code}: {e}")
            return JSONResponse(e.to_payload(), status_code=e.status_code)

        content = {"result": analysis.result, "analysis": analysis.analysis}
        if analysis.model_used != context.settings.gemini_model:
            content["modelUsed"] = analysis.model_used
        if analysis.raw is not None:
            content["raw"] = analysis.raw
        return JSONResponse(content)

    return router
