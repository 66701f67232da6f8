# app/core/logger.py
import logging
import sys

from app.core.config import CONFIG

_logger = logging.getLogger("academic_records")
if not _logger.handlers:
    level = getattr(logging, CONFIG.LOG_LEVEL.upper(), None)
    # unknown level names fall back to INFO
    _logger.setLevel(level if isinstance(level, int) else logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    _logger.addHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Child of the service logger, e.g. get_logger("registry") -> academic_records.registry."""
    if name:
        return _logger.getChild(name)
    return _logger
