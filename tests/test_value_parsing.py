"""
Contract tests for numeric field extraction
"""

import pytest

from memsampler.collectors.values import SUFFIX_WIDTH, parse_value_from_line
from memsampler.errors import (
    InvalidInteger,
    LineTooShort,
    NoWhitespaceBoundary,
    ValueParseError,
)


def test_parse_kb_line() -> None:
    assert parse_value_from_line("MemTotal:        16384 kB") == 16384


def test_parse_tab_separated_and_zero() -> None:
    assert parse_value_from_line("Writeback:\t0 kB") == 0


def test_parse_custom_suffix_width() -> None:
    """
    Unitless lines parse with suffix_width=0
    """
    assert parse_value_from_line("HugePages_Total:       12", suffix_width=0) == 12


def test_suffix_width_default() -> None:
    assert SUFFIX_WIDTH == 3


@pytest.mark.parametrize(
    ("line", "error"),
    [
        ("kB", LineTooShort),
        ("MemTotal:16384 kB", NoWhitespaceBoundary),
        ("MemTotal:        abc kB", InvalidInteger),
        ("MemTotal:        -12 kB", InvalidInteger),
        ("MemTotal:         kB", InvalidInteger),
    ],
)
def test_parse_errors_are_recoverable(line: str, error: type) -> None:
    """
    Every extraction failure is a typed, recoverable ValueParseError
    """
    with pytest.raises(error) as excinfo:
        parse_value_from_line(line)

    assert isinstance(excinfo.value, ValueParseError)
    assert excinfo.value.recoverable is True
    assert excinfo.value.line == line
