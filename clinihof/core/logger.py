import logging
import sys

from clinihof.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

def setup_logging():
    """
    Configure the ``clinihof`` logger. Level comes from ``LOG_LEVEL``.
    """
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger("clinihof")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    # passlib reads bcrypt.__about__ and logs a traceback on bcrypt>=4
    logging.getLogger("passlib.handlers.bcrypt").setLevel(logging.ERROR)

    return logger

logger = setup_logging()
