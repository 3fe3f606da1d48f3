#!/usr/bin/env python3
"""
Development startup script: runs the API under uvicorn with the configured
host, port and log level.
"""

import logging
import os
import sys

import uvicorn

# Allow running from a checkout without installing the package
current_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, os.path.join(current_dir, "src"))

from visitflow.core.config import get_settings  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("visitflow")


def main() -> None:
    settings = get_settings()
    logger.info("Starting uvicorn server on %s:%s", settings.host, settings.port)
    uvicorn.run(
        "visitflow.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development and settings.debug,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
