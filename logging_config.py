import logging
import sys

from loguru import logger

from config import get_settings

NOISY_LIBRARIES = ["httpx", "httpcore", "uvicorn.access", "watchdog"]


def setup_logging(debug: bool = None):
    settings = get_settings()
    if debug is None:
        debug = settings.log_level.upper() == "DEBUG"

    level = "DEBUG" if debug else settings.log_level.upper()

    logger.remove()

    if settings.log_json:
        logger.add(sys.stderr, level=level, format="{message}", serialize=True)
    else:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        )

    for lib in NOISY_LIBRARIES:
        logging.getLogger(lib).setLevel(logging.WARNING)

    if debug:
        logger.info("Debug logging enabled")
