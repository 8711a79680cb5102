import logging

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_level = logging.INFO
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger with a single stream handler attached.

    Repeated calls for the same name reuse the existing handler. Records do
    not propagate to the root logger, so a root handler installed by
    configure_logging() never prints them a second time.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(DEFAULT_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(_level)
        logger.propagate = False
    _loggers[name] = logger
    return logger


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for entry points (API, CLI) and apply level to our loggers."""
    global _level
    _level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=_level, format=DEFAULT_FORMAT)
    for logger in _loggers.values():
        logger.setLevel(_level)
