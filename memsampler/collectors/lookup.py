"""
memsampler.collectors.lookup
AUTHOR: carter-vin

One-shot line index for the keys a reader needs

Contract:
- result maps line number -> key, ascending by line number
- every required key appears exactly once (first occurrence wins)
- stream is rewound to 0 and the buffer drained on return
"""

from __future__ import annotations

from typing import BinaryIO, Iterable, Optional

from memsampler.collectors.buffer import ReadBuffer
from memsampler.errors import MalformedLine, MissingRequiredKey


def split_key(line: str) -> Optional[str]:
    """
    Key token before the first ':'; None when the line has no delimiter
    """
    key, sep, _ = line.partition(":")
    if not sep:
        return None
    return key


def build_line_index(
    stream: BinaryIO,
    buf: ReadBuffer,
    required_keys: Iterable[str],
) -> dict[int, str]:
    """
    Read the whole source once and record where each required key lives

    Raises:
    - MalformedLine if a required key sits on a line without ':'
    - MissingRequiredKey if a required key is not in the source at all
    - OSError from the stream (caller wraps it)
    """
    try:
        buf.fill(stream)
        stream.seek(0)
        # split on "\n" only, matching LineCursor's line numbering
        lines = [line.removesuffix("\r") for line in buf.text().split("\n")]
    finally:
        buf.drain()

    positions: dict[str, int] = {}
    undelimited: dict[str, int] = {}

    for n_line, line in enumerate(lines):
        key = split_key(line)
        if key is None:
            words = line.split(None, 1)
            if words:
                undelimited.setdefault(words[0], n_line)
            continue
        positions.setdefault(key, n_line)

    lookup: dict[int, str] = {}
    for key in required_keys:
        n_line = positions.get(key)
        if n_line is None:
            if key in undelimited:
                bad_line = undelimited[key]
                raise MalformedLine(bad_line, lines[bad_line])
            raise MissingRequiredKey(key)
        lookup[n_line] = key

    # ascending order drives delta-advance in MemInfo.stats()
    return dict(sorted(lookup.items()))
