"""
Logging configuration.

Modules log through `logging.getLogger(__name__)`; the entry points
(API app, CLI) call `setup_logging()` once.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configures the `prompt3d` logger with a console handler."""
    logger = logging.getLogger("prompt3d")
    logger.setLevel(level)

    if not any(getattr(h, "_prompt3d", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._prompt3d = True
        logger.addHandler(handler)

    return logger
