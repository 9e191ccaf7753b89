"""
Logging infrastructure.

Provides logging utilities shared by the scheduler and the API layer.
"""
import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance.

    Args:
        name: Logger name (usually module name)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def configure_logging(level: str = "INFO") -> None:
    """
    Apply a log level to every logger created through ``get_logger``.

    Args:
        level: Level name such as "DEBUG" or "INFO"
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.getLogger().setLevel(numeric)
    for name in list(logging.root.manager.loggerDict):
        if name.startswith(("orchestration", "core", "api")):
            logging.getLogger(name).setLevel(numeric)
