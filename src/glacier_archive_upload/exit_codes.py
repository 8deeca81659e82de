"""Exit code constants for CLI."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for glacier-archive-upload.

    Usage errors (bad arguments, unknown subcommand, bad part size) exit
    with 1 so shell scripts can tell them apart from service failures.
    """

    SUCCESS = 0
    USAGE_ERROR = 1
    AUTH_FAILURE = 2
    REMOTE_ERROR = 3
    LEDGER_ERROR = 4
    NOT_FOUND = 5
    USER_CANCELLED = 6
    IO_ERROR = 7
