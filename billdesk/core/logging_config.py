# billdesk/core/logging_config.py
import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "info") -> None:
    """
    Install a single stream handler on the root logger.
    Safe to call more than once (uvicorn reload, tests).
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in root.handlers:
        if getattr(handler, "_billdesk", False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._billdesk = True
    root.addHandler(handler)
