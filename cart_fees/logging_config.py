"""
Logging setup for the cart fees service.

main.py calls setup_logging() once, after .env is loaded. Every module logs
through logging.getLogger(__name__), so the "cart_fees" logger controls the
whole package.

Environment variables:
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: INFO)
"""
import logging
import os
import sys
from typing import Optional

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# SQL statements and per-request access lines are only wanted when debugging.
NOISY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging to stdout and set the package level.

    An unknown level falls back to INFO rather than failing startup.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if level not in VALID_LEVELS:
        level = "INFO"
    numeric_level = getattr(logging, level)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    logging.getLogger("cart_fees").setLevel(numeric_level)

    noisy_level = numeric_level if level == "DEBUG" else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
