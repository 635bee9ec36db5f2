"""
Logging setup shared across the application.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Get a module logger with a stream handler attached to the root
    "focusplan" logger.

    Args:
        name: Logger name (usually __name__)
        level: Optional explicit level; defaults to DEBUG when settings.DEBUG
    """
    root = logging.getLogger("focusplan")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        if level is None:
            from focusplan.core.config import get_settings

            level = logging.DEBUG if get_settings().DEBUG else logging.INFO
        root.setLevel(level)
    elif level is not None:
        root.setLevel(level)

    if name.startswith("focusplan"):
        return logging.getLogger(name)
    return root.getChild(name)

