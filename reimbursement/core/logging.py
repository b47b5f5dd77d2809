"""Logging setup for the API process.

Every module logs through ``logging.getLogger(__name__)``; this module only
attaches a single stream handler to the package logger so records from
``reimbursement.*`` end up on stderr with a consistent format.
"""

import logging
import sys

LOGGER_NAME = "reimbursement"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def configure_logging(level: int | str = logging.INFO) -> None:
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = True
    _configured = True


def reset_logging() -> None:
    """Remove the handlers added by configure_logging (used by tests)."""
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    _configured = False
