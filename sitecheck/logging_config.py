"""
Logging setup for sitecheck.
"""
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Attach a single console handler to the package logger."""
    logger = logging.getLogger("sitecheck")
    logger.setLevel(level.upper())

    if logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
