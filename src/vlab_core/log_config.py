# --- src/vlab_core/log_config.py ---
import logging
import os
import sys

LOG_LEVEL_ENV_VAR = "VLAB_LOG_LEVEL"


def setup_logging(level=None):
    """ Configures basic logging to stdout. The level defaults to $VLAB_LOG_LEVEL, then INFO. """
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV_VAR, "INFO").upper()
    log_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)-5.5s] [%(name)s] %(message)s"
    )
    root_logger = logging.getLogger() # Get the root logger

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)
    logging.info("Logging configured.")
