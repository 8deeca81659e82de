"""Tests for exit code constants."""

from glacier_archive_upload.exit_codes import ExitCode


def test_exit_codes_are_distinct():
    """All exit codes should have unique values."""
    codes = list(ExitCode)
    assert len(codes) == len({c.value for c in codes})


def test_success_is_zero():
    """Success should be 0 per Unix convention."""
    assert ExitCode.SUCCESS == 0


def test_usage_error_is_one():
    assert ExitCode.USAGE_ERROR == 1


def test_exit_codes_are_integers():
    """Exit codes should be usable as integers."""
    assert isinstance(ExitCode.SUCCESS.value, int)
    assert isinstance(ExitCode.REMOTE_ERROR.value, int)
