# crane3d/logging_config.py

"""Console and file logging for crane simulation runs.

Library modules only create ``logging.getLogger(__name__)`` loggers below
the ``crane3d`` namespace; attaching handlers is left to the entry point.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> logging.Logger:
    """Attach handlers to the ``crane3d`` logger.

    Calling this again replaces the handlers of the previous call, so a
    long-running host can switch the level or the log file between runs.

    Parameters
    ----------
    level : threshold for the logger and all of its handlers
    log_file : optional path; the file is truncated and receives the same
        records as stdout

    Returns
    -------
    The configured ``crane3d`` logger.
    """
    logger = logging.getLogger("crane3d")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging to stdout%s", f" and {log_file}" if log_file else "")
    return logger
