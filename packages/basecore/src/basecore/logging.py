"""
Logging setup shared by every service entry point.
"""

import logging

from basecore.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    """
    Configure the root logger once.

    Args:
        level: Log level name; falls back to LOG_LEVEL from settings
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = (level or get_settings().LOG_LEVEL).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # HTTP clients are noisy at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
