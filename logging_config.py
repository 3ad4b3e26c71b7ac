"""
Logging setup for the extractor.

Everything logs under the `prayer_timetable` logger (or a child of it), one
line per event on stdout, tagged with the stage that emitted it.
"""

import logging
import sys
from typing import Optional

APP_LOGGER = "prayer_timetable"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: Optional[str] = None, name: Optional[str] = None) -> logging.Logger:
    """Return the app logger, or its child `name`, attaching the stdout
    handler on first use. Calling it again only adjusts the level."""
    app_logger = logging.getLogger(APP_LOGGER)

    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        app_logger.addHandler(handler)
        app_logger.setLevel((level or "INFO").upper())
    elif level:
        app_logger.setLevel(level.upper())

    # uvicorn would print request lines a second time
    logging.getLogger("uvicorn.access").handlers.clear()

    return app_logger.getChild(name) if name else app_logger
