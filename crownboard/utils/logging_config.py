"""
Logging setup for Crownboard.

One stream handler on the root logger, level taken from LOG_LEVEL.
"""
import logging
import os

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

# HTTP client libraries log every request at INFO
NOISY_LIBRARY_LOGGERS = ('httpx', 'httpcore')


def _resolve_level(default: str = 'INFO') -> int:
    level_name = os.getenv('LOG_LEVEL', default).upper()
    return getattr(logging, level_name, logging.INFO)


def setup_logging(level: str = None) -> logging.Logger:
    """
    Configure the root logger once.

    Args:
        level: Optional level name overriding LOG_LEVEL

    Returns:
        The root logger
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    if level:
        root.setLevel(getattr(logging, level.upper(), logging.INFO))
    else:
        root.setLevel(_resolve_level())

    for name in NOISY_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
