"""
Logging setup for the console and ``python -m graphcalc``.
"""
import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Send the messages of the 'graphcalc' loggers to stdout, and to `log_file` if one is given. Calling it again
    replaces the handlers of the previous call.

    :param level: Lowest level shown, Ex. ``logging.DEBUG``
    :param log_file: Path of a log file, overwritten on every run
    """
    logger = logging.getLogger("graphcalc")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s', datefmt='%H:%M:%S')
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging initialized.")
