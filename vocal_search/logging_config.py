"""Logging setup for the vocal-search command line and embedding apps.

Library code only calls ``get_logger(__name__)``; nothing is printed until
an application calls ``setup_logging``.
"""

import logging
import sys
from typing import Dict, Optional, TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Per-module levels; children inherit from the closest configured parent
MODULE_LOG_LEVELS: Dict[str, int] = {
    "vocal_search": logging.INFO,
    "vocal_search.store": logging.WARNING,
    "vocal_search.search": logging.INFO,
    "vocal_search.search.retriever": logging.INFO,  # DEBUG shows per-lookup timings
    "vocal_search.search.scorer": logging.WARNING,  # one line per dropped candidate at DEBUG
    "vocal_search.search.cache": logging.WARNING,
    "vocal_search.detection": logging.INFO,
    "vocal_search.audio": logging.INFO,
    "vocal_search.core.config": logging.WARNING,
}

THIRD_PARTY_LOG_LEVELS: Dict[str, int] = {
    "aubio": logging.ERROR,
    "asyncio": logging.WARNING,
}

_handler: Optional[logging.Handler] = None


def setup_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> logging.Handler:
    """Attach one console handler to the package logger and apply levels.

    Args:
        level: If given (e.g. "DEBUG"), overrides every vocal_search level
        stream: Where to write; defaults to stderr so command output stays clean

    Returns:
        The shared handler (repeat calls reuse it)
    """
    global _handler

    if _handler is None:
        _handler = logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    elif stream is not None:
        _handler.setStream(stream)

    levels = dict(MODULE_LOG_LEVELS)
    if level:
        override = logging.getLevelName(level.upper())
        if isinstance(override, int):
            levels = {name: override for name in levels}
        else:
            logging.getLogger("vocal_search").error(f"Invalid log level: {level}")

    package_logger = logging.getLogger("vocal_search")
    if _handler not in package_logger.handlers:
        package_logger.addHandler(_handler)
    package_logger.propagate = False

    for name, module_level in levels.items():
        logging.getLogger(name).setLevel(module_level)

    for name, library_level in THIRD_PARTY_LOG_LEVELS.items():
        library_logger = logging.getLogger(name)
        library_logger.setLevel(library_level)
        if _handler not in library_logger.handlers:
            library_logger.addHandler(_handler)
        library_logger.propagate = False

    package_logger.debug(f"Logging configured ({level or 'default levels'})")
    return _handler
