#!/usr/bin/env python3
"""Create the product catalog schema on the configured database."""

import logging

from catalog_api.core.config import get_settings
from catalog_api.core.logging import configure_logging
from catalog_api.db.session import init_db

logger = logging.getLogger(__name__)


if __name__ == "__main__":
    configure_logging(get_settings().log_level)
    init_db()
    logger.info("Schema ready")
