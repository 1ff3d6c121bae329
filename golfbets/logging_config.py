import logging
import sys
from typing import Optional, Union

from golfbets.config import EngineSettings


def setup_logging(level: Optional[Union[int, str]] = None):
    """Configures the root logger for the settlement engine."""
    if level is None:
        level = EngineSettings.from_env().log_level
    logger = logging.getLogger()
    logger.setLevel(level)

    while logger.hasHandlers():
        logger.removeHandler(logger.handlers[0])

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname).1s | %(name)-30.30s | %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
