# pagefolio/logging_config.py

import logging
import sys

from .config import LOG_LEVEL

logger = logging.getLogger("pagefolio")


def setup_logging():
    """
    Configures the root logger for the application.
    Called once from the FastAPI startup hook.
    """
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        stream=sys.stdout,
    )
    # Silence noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
