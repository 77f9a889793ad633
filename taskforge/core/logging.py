"""Logging setup for the application."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Route all taskforge loggers to stdout at the given level."""
    root = logging.getLogger()
    if not any(getattr(h, "_taskforge", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._taskforge = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level.upper())
