"""Process-wide logging setup."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger at ``level``; later calls leave it alone."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
