# src/vlab_core/api/app.py
"""
Application factory for the Virtual Lab HTTP API.

All runtime state lives in an `AppContext` attached as `app.state.context`, so tests
can build an app around their own settings, registries and analysis client:

    app = create_app(context=AppContext(settings=AppSettings(history_dir=tmp_path)))
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import AppSettings
from .context import AppContext
from .routers import (
    setup_chemistry_router,
    setup_gemini_router,
    setup_health_router,
    setup_history_router,
    setup_labs_router,
)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[AppSettings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """
    Creates the FastAPI app.

    Args:
        settings: Settings for a fresh context (default: read from the environment).
            Ignored when `context` is given.
        context: Pre-configured AppContext (for testing).
    """
    if context is None:
        context = AppContext(settings=settings) if settings is not None else AppContext()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctx: AppContext = app.state.context
        if not ctx.settings.has_api_key:
            logger.warning("GEMINI_API_KEY is not set. Reaction analysis requests will fail.")
        logger.info(f"Virtual Lab API starting (model={ctx.settings.gemini_model}).")
        try:
            yield
        finally:
            await ctx.aclose()
            logger.info("Virtual Lab API stopped.")

    app = FastAPI(title="Virtual Lab API", version="0.1.0", lifespan=lifespan)
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse({"error": "Not Found", "path": request.url.path}, status_code=404)
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    app.include_router(setup_health_router(context))
    app.include_router(setup_gemini_router(context))
    app.include_router(setup_chemistry_router(context))
    app.include_router(setup_labs_router(context))
    app.include_router(setup_history_router(context))

    return app
