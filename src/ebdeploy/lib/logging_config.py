"""Logging setup shared by the eb-deploy CLI and library modules."""

from __future__ import annotations

import logging
import sys

LOGGER_NAMESPACE = "ebdeploy"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Third-party loggers that are noisy at INFO level
_NOISY_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the eb-deploy namespace.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        Logger instance
    """
    if name != LOGGER_NAMESPACE and not name.startswith(f"{LOGGER_NAMESPACE}."):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return logging.getLogger(name)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging for the eb-deploy namespace.

    Log records go to stderr so stdout stays reserved for command output.

    Args:
        verbose: Enable DEBUG level, including AWS SDK loggers
        quiet: Only emit warnings and errors
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    root_logger = logging.getLogger(LOGGER_NAMESPACE)
    root_logger.setLevel(level)

    # Avoid stacking handlers when called more than once (tests, repeated runs)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
    root_logger.propagate = False

    sdk_level = logging.DEBUG if verbose else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)
