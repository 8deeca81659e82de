"""Tests for logging configuration."""

import logging

from glacier_archive_upload.log import get_logger, setup_logging


def test_setup_logging_default_level():
    """Default logging level should be INFO."""
    setup_logging()
    logger = get_logger()
    assert logger.level == logging.INFO


def test_setup_logging_verbose():
    """Verbose mode should set DEBUG level."""
    setup_logging(verbose=True)
    logger = get_logger()
    assert logger.level == logging.DEBUG


def test_setup_logging_quiet():
    """Quiet mode should set WARNING level."""
    setup_logging(quiet=True)
    logger = get_logger()
    assert logger.level == logging.WARNING


def test_get_logger_returns_named_logger():
    """get_logger should return the glacier-archive-upload logger."""
    logger = get_logger()
    assert logger.name == "glacier-archive-upload"


def test_repeated_setup_does_not_duplicate_handlers():
    setup_logging()
    setup_logging()
    assert len(get_logger().handlers) == 1


def test_log_file_records_debug(tmp_path):
    """The log file gets DEBUG messages even when the console is quiet."""
    log_file = tmp_path / "upload.log"
    setup_logging(quiet=True, log_file=str(log_file))
    logger = get_logger()

    logger.debug("part 0-1048575 sent")
    for handler in logger.handlers:
        handler.flush()

    assert "part 0-1048575 sent" in log_file.read_text()
    setup_logging()


def test_botocore_is_quieted():
    setup_logging(verbose=True)
    assert logging.getLogger("botocore").level == logging.WARNING


def test_debug_boto():
    setup_logging(verbose=True, debug_boto=True)
    assert logging.getLogger("botocore").level == logging.DEBUG
    setup_logging()


def test_debug_boto_shares_handlers():
    """botocore output reaches the CLI's handlers only with debug_boto."""
    setup_logging(debug_boto=True)
    handlers = list(get_logger().handlers)
    assert all(h in logging.getLogger("botocore").handlers for h in handlers)

    setup_logging()
    assert not any(h in logging.getLogger("botocore").handlers for h in handlers)
