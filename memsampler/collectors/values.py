"""
memsampler.collectors.values
AUTHOR: carter-vin

Numeric field extraction for `Key:   <int> kB` lines
"""

from __future__ import annotations

from memsampler.errors import InvalidInteger, LineTooShort, NoWhitespaceBoundary

# Width of the unit suffix, " kB" in /proc/meminfo
SUFFIX_WIDTH = 3


def parse_value_from_line(line: str, suffix_width: int = SUFFIX_WIDTH) -> int:
    """
    Return the integer that ends `suffix_width` chars before end of line

    Rules:
    - field starts right after the last whitespace before the cutoff
    - ASCII digits only, no sign
    """
    if len(line) < suffix_width:
        raise LineTooShort(line)

    cutoff = len(line) - suffix_width
    head = line[:cutoff]

    boundary = max(head.rfind(" "), head.rfind("\t"))
    if boundary < 0:
        raise NoWhitespaceBoundary(line)

    field = head[boundary + 1 :]
    if not field or not field.isascii() or not field.isdigit():
        raise InvalidInteger(line)

    return int(field)
