# src/vlab_core/api/routers/health.py
import logging

from fastapi import APIRouter

from ..context import AppContext
from ..models import HealthResponse

logger = logging.getLogger(__name__)


def setup_health_router(context: AppContext) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["health"])

    @router.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        settings = context.settings
        return HealthResponse(status="ok", model=settings.gemini_model, hasKey=settings.has_api_key)

    return router
