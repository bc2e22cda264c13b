"""Root logger configuration."""
from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger; unknown level names fall back to INFO."""
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(format=_FORMAT)
    logging.getLogger().setLevel(numeric)

    # Per-request access lines are noise at DEBUG.
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
