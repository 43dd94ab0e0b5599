# logging_setup.py
import logging
import os
import sys

ROOT_LOGGER = "smartspend"
_configured = False


def configure_logging(level=None, stream=None):
    """Attach one stderr handler to the ``smartspend`` logger. Entry points call this once."""
    global _configured
    if _configured:
        return
    level = level or os.getenv("SMARTSPEND_LOG_LEVEL") or "INFO"
    logger = logging.getLogger(ROOT_LOGGER)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    if isinstance(level, str):
        level = getattr(logging, level.strip().upper(), logging.INFO)
    logger.setLevel(level)
    logger.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    # library modules log through this and never add handlers themselves
    return logging.getLogger(name)
