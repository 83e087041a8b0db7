import logging
import os

FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_managed: list[logging.Logger] = []


def log_level() -> int:
    return getattr(logging, os.getenv("VTPACK_LOG", "INFO").upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    level = log_level()
    logger.setLevel(level)
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    _managed.append(logger)
    return logger


def apply_log_level() -> int:
    """Re-read VTPACK_LOG, e.g. after a .env file was loaded, and apply it."""
    level = log_level()
    for logger in _managed:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
    return level
