"""Tests for part size parsing and validation."""

import pytest

from glacier_archive_upload.part_size import (
    DEFAULT_PART_SIZE,
    MAX_PART_SIZE,
    MIN_PART_SIZE,
    InvalidPartSize,
    InvalidPartSizeFormat,
    is_valid_part_size,
    parse_part_size,
    validate_part_size,
)

MIB = 1024 * 1024
GIB = 1024 * MIB

VALID_SIZES = [MIB * 2**k for k in range(13)]


class TestIsValidPartSize:
    """Test the power-of-two multiple of 1 MiB rule."""

    @pytest.mark.parametrize("size", VALID_SIZES)
    def test_valid_sizes(self, size):
        """Every 1 MiB * 2^k up to 4 GiB is accepted."""
        assert is_valid_part_size(size)

    def test_bounds(self):
        """1 MiB and 4 GiB are the inclusive limits."""
        assert MIN_PART_SIZE == MIB
        assert MAX_PART_SIZE == 4 * GIB
        assert is_valid_part_size(MIN_PART_SIZE)
        assert is_valid_part_size(MAX_PART_SIZE)

    @pytest.mark.parametrize(
        "size",
        [
            0,
            -MIB,
            1,
            MIB - 1,
            MIB + 1,
            3 * MIB,
            6 * MIB,
            100 * MIB,
            8 * GIB,
            4 * GIB + MIB,
        ],
    )
    def test_invalid_sizes(self, size):
        """Zero, negatives, non-powers-of-two and anything over 4 GiB are rejected."""
        assert not is_valid_part_size(size)

    @pytest.mark.parametrize("size", [float(MIB), "1048576", True, None])
    def test_non_integers_rejected(self, size):
        """Only exact integers count."""
        assert not is_valid_part_size(size)

    def test_default_is_valid(self):
        """The default part size is 64 MiB and valid."""
        assert DEFAULT_PART_SIZE == 64 * MIB
        assert is_valid_part_size(DEFAULT_PART_SIZE)


class TestValidatePartSize:
    def test_returns_valid_size(self):
        assert validate_part_size(8 * MIB) == 8 * MIB

    def test_raises_for_invalid(self):
        with pytest.raises(InvalidPartSize) as exc_info:
            validate_part_size(3 * MIB)
        assert exc_info.value.size == 3 * MIB


class TestParsePartSize:
    """Test parsing of -p/--part-size values."""

    def test_megabytes(self):
        assert parse_part_size("64M") == 67108864

    def test_gigabytes(self):
        assert parse_part_size("1G") == 1073741824

    def test_plain_bytes(self):
        assert parse_part_size("100") == 100

    def test_lowercase_unit(self):
        assert parse_part_size("4m") == 4 * MIB

    def test_surrounding_whitespace(self):
        assert parse_part_size(" 2G ") == 2 * GIB

    @pytest.mark.parametrize("text", ["64X", "", "M", "1.5G", "-1M", "64 M", "64MB", "0x10"])
    def test_format_errors(self, text):
        """Anything but digits with an optional M or G is a format error."""
        with pytest.raises(InvalidPartSizeFormat) as exc_info:
            parse_part_size(text)
        assert exc_info.value.text == text

    def test_parsing_does_not_validate(self):
        """Parsed values are checked separately."""
        assert parse_part_size("3M") == 3 * MIB
        assert not is_valid_part_size(parse_part_size("3M"))

    def test_errors_are_value_errors(self):
        """Both errors can be handled as ValueError at the CLI boundary."""
        assert issubclass(InvalidPartSize, ValueError)
        assert issubclass(InvalidPartSizeFormat, ValueError)
