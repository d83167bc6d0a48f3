"""Centralized logging setup for the license field extractor.

All modules log through named loggers obtained from :func:`get_logger`;
handlers are attached once, on the root logger, by :func:`setup_logging`.
"""

import logging
import sys

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that flood DEBUG output while decoding images.
_NOISY_LOGGERS = ("PIL",)


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a stdout handler.

    Calling this more than once keeps the first handler.

    Args:
        level: Logging level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger instance.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
