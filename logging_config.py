import logging
import os
import sys

LOGGER_NAME = "timeflow"
LOG_FORMAT = "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Send the ledger's log records to stdout.

    The level comes from ``level``, then TIMEFLOW_LOG_LEVEL, then INFO.
    Safe to call more than once.
    """
    logger = logging.getLogger(LOGGER_NAME)
    level_name = (level or os.environ.get("TIMEFLOW_LOG_LEVEL") or "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    # Clear any handlers from an earlier call
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)
    return logger
