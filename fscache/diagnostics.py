"""Failure-tolerant logging for storage diagnostics."""

import contextlib
import logging


def report(logger: logging.Logger, level: int, msg: str) -> None:
    """Log msg, suppressing any error raised by the logger or its handlers.

    A broken diagnostics sink must never turn a soft cache failure into an
    exception.
    """
    with contextlib.suppress(Exception):
        logger.log(level, msg)
