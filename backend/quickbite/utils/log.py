import logging
import sys

from quickbite.config import settings


def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger writing to stdout.

    The handler is attached only once per logger, so modules can call this at
    import time without duplicating output on reload.
    """
    log = logging.getLogger(name)
    log.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    if not log.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(
            logging.Formatter("[%(name)s] %(levelname)s %(message)s")
        )
        log.addHandler(h)
    return log
