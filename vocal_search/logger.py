"""Per-module loggers for vocal_search."""

import logging
from functools import lru_cache

PACKAGE_LOGGER = "vocal_search"


@lru_cache(maxsize=None)
def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, nested under the package logger.

    Names from outside the package (``__main__``, ad-hoc scripts) are
    prefixed so the levels set by ``setup_logging`` still reach them.
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
