"""Global logging config.

Import this module once per entry point (the FastAPI app, the exporter CLI) as

from service.tempchart.base import logging_config as _  # configure logging

TEMPCHART_LOG_LEVEL accepts any standard level name (DEBUG, INFO, WARNING, ...).
Unknown names fall back to INFO.
"""

import logging
import os

_level_name = os.environ.get("TEMPCHART_LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=logging.getLevelNamesMapping().get(_level_name, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
