"""Logging setup for hosts embedding the engine."""

from __future__ import annotations

import logging

from timeledger.core.config import AppSettings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: AppSettings | None = None) -> logging.Logger:
    """Attach a single stream handler to the ``timeledger`` logger.

    Safe to call more than once; the handler is only installed the first time.
    """
    if settings is None:
        settings = AppSettings()

    root = logging.getLogger("timeledger")
    root.setLevel(settings.log_level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root
