import logging
import sys

from app.config import settings


def get_logger(name: str) -> logging.Logger:
    """Module logger writing to stdout with a ``[NAME]`` prefix; handler installed once."""
    log = logging.getLogger(f"purewater.{name}")
    log.setLevel(settings.LOG_LEVEL.upper())
    if not log.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter(f"[{name.upper()}] %(levelname)s %(message)s"))
        log.addHandler(h)
        log.propagate = False
    return log
