"""Logging configuration for glacier-archive-upload."""

import logging
import sys

LOGGER_NAME = "glacier-archive-upload"

# Third-party loggers that are chatty at DEBUG (one line per HTTP request)
NOISY_LOGGERS = ("botocore", "boto3", "urllib3")

_logger: logging.Logger | None = None
_boto_handlers: list[logging.Handler] = []


def _level_for(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    return logging.INFO


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: str | None = None,
    debug_boto: bool = False,
) -> None:
    """Configure the CLI logger.

    Console output goes to stderr so that ``--json`` results on stdout stay
    parseable. The optional log file always records DEBUG, which includes
    the range and tree hash of every uploaded part.
    """
    global _logger, _boto_handlers

    level = _level_for(verbose, quiet)

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG if log_file else level)

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)-5s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Library loggers have no handlers of their own, so share ours with them
    for name in NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        for handler in _boto_handlers:
            noisy.removeHandler(handler)
        noisy.setLevel(logging.DEBUG if debug_boto else logging.WARNING)
        if debug_boto:
            for handler in logger.handlers:
                noisy.addHandler(handler)

    _boto_handlers = list(logger.handlers) if debug_boto else []
    _logger = logger


def get_logger() -> logging.Logger:
    """Get the logger, initializing with defaults if setup_logging wasn't called."""
    global _logger
    if _logger is None:
        setup_logging()
    assert _logger is not None
    return _logger
