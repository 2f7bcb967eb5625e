# src/vlab_core/api/server.py
"""`vlab-server` console entry point."""
import logging

import uvicorn

from ..config import AppSettings
from ..log_config import setup_logging
from .app import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    setup_logging()
    settings = AppSettings.from_env()
    app = create_app(settings=settings)
    logger.info(f"Starting Virtual Lab API on port {settings.port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
