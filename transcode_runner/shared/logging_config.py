"""Structured logging for the runner.

Modules log through child loggers (``Logger(service=SERVICE_NAME, child=True)``)
that propagate to the service logger created here, so one call to
``configure_logging`` sets the level for the whole process.
"""

import sys

from aws_lambda_powertools import Logger

SERVICE_NAME = "transcode-runner"

logger = Logger(service=SERVICE_NAME)


def configure_logging(level: str = "INFO") -> Logger:
    """Set the service log level. Call once at startup."""
    logger.setLevel(level)
    return logger


def flush_logs() -> None:
    """Flush pending log output; called on every exit path."""
    for handler in logger.handlers:
        handler.flush()
    sys.stdout.flush()
    sys.stderr.flush()
