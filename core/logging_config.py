# core/logging_config.py
import logging

from core.config import settings

LOGGER_NAME = "parkwise"
LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

# supabase-py logs every PostgREST / realtime round trip at INFO
CHATTY_LOGGERS = ("httpx", "httpcore", "realtime", "hpack")


def setup_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    # uvicorn --reload imports this module more than once
    if logger.handlers:
        return logger

    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(level)
    logger.propagate = False

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    if level > logging.DEBUG:
        for name in CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return logger


logger = setup_logger()
