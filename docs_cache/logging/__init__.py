from __future__ import annotations

import logging
import sys

from docs_cache.config import settings


def init_logging(verbose: bool = False) -> None:
    """
    Initialize application logging.

    Progress messages are emitted at INFO/DEBUG and only shown with ``verbose``.
    Without it the level comes from ``settings.log_level``.
    """

    root_logger = logging.getLogger()

    level_name = "DEBUG" if verbose else settings.log_level.upper()
    level = logging.getLevelNamesMapping().get(level_name)
    if level is None:
        raise ValueError(f"Invalid logging level: {settings.log_level}")

    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        fmt="[%(asctime)s][%(levelname)s][%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    # Third-party clients are chatty at DEBUG.
    for noisy in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))


__all__ = ["init_logging"]
