import logging
from logging.handlers import RotatingFileHandler

from .settings import settings

__all__ = ["get_logger"]

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str = "tabledash") -> logging.Logger:
    """Return a configured logger. Safe to call multiple times (won't duplicate handlers).

    Level comes from LOG_LEVEL; LOG_FILE enables an extra rotating file handler.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    fmt = logging.Formatter(LOG_FORMAT)

    sh = logging.StreamHandler()
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    if settings.LOG_FILE:
        try:
            fh = RotatingFileHandler(settings.LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
        except OSError:
            # keep console logging when the file can't be opened
            logger.exception("Failed to create file log handler for %s", settings.LOG_FILE)
        else:
            fh.setFormatter(fmt)
            logger.addHandler(fh)

    return logger
