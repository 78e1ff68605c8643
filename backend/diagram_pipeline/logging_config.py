"""
Logger configuration.

Every module logs through ``logging.getLogger(__name__)`` with a short
``[STAGE]`` tag at the start of the message. The HTTP app calls
``configure_logging`` once at startup.
"""

import logging
import sys

from diagram_pipeline.config import LOG_LEVEL


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure the ``diagram_pipeline`` logger tree with a console handler."""
    logger = logging.getLogger("diagram_pipeline")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False

    # Reduce noise from the HTTP engine
    logging.getLogger("urllib3").setLevel(logging.WARNING)
