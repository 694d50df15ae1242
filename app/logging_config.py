"""Process-wide logging setup."""

from __future__ import annotations

import logging

from app.config import settings


def configure_logging(level: str | None = None) -> None:
    """Install a basic handler unless the host (uvicorn, pytest) already did."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=(level or settings.log_level).upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
