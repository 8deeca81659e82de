"""Part size parsing and validation for multipart uploads."""

import re

MIB = 1024 * 1024
GIB = 1024 * MIB

MIN_PART_SIZE = MIB
MAX_PART_SIZE = 4 * GIB
DEFAULT_PART_SIZE = 64 * MIB

_UNITS = {"": 1, "M": MIB, "G": GIB}
_SIZE_RE = re.compile(r"^([0-9]+)([MG]?)$", re.IGNORECASE)


class InvalidPartSizeFormat(ValueError):
    """Raised when a part size string cannot be parsed."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(
            f"Invalid part size format: {text!r} (expected digits, optionally "
            f"followed by M or G, e.g. 64M)"
        )


class InvalidPartSize(ValueError):
    """Raised when a part size is not a power-of-two multiple of 1 MiB up to 4 GiB."""

    def __init__(self, size: object):
        self.size = size
        super().__init__(
            f"Invalid part size: {size} bytes (must be 1 MiB times a power of two, "
            f"between 1 MiB and 4 GiB)"
        )


def is_valid_part_size(size: int) -> bool:
    """Check that ``size`` is one of 1 MiB, 2 MiB, 4 MiB, ... 4 GiB."""
    if isinstance(size, bool) or not isinstance(size, int):
        return False

    candidate = MIN_PART_SIZE
    while candidate <= MAX_PART_SIZE:
        if size == candidate:
            return True
        if size < candidate:
            return False
        candidate *= 2

    return False


def validate_part_size(size: int) -> int:
    """Return ``size`` unchanged, or raise InvalidPartSize."""
    if not is_valid_part_size(size):
        raise InvalidPartSize(size)
    return size


def parse_part_size(text: str) -> int:
    """Parse "100", "64M" or "1G" into bytes.

    The result is not validated; pass it through validate_part_size.
    """
    match = _SIZE_RE.match(text.strip())
    if not match:
        raise InvalidPartSizeFormat(text)

    digits, unit = match.groups()
    return int(digits) * _UNITS[unit.upper()]
