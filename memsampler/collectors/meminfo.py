"""
memsampler.collectors.meminfo
AUTHOR: carter-vin

Sampled /proc/meminfo reader
- emulates free(1) without spawning a process per sample
- indexes the needed lines once, then re-reads only those lines each poll
- not thread-safe: one reader per thread, or serialize calls

Line positions are a hint. The kernel keeps /proc/meminfo order stable, but
every poll re-checks the landed line's key, and a mismatch surfaces as a
StaleIndexError the caller can fix with reindex().
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, BinaryIO, Optional

from memsampler.collectors.buffer import INITIAL_BUF_SIZE, ReadBuffer
from memsampler.collectors.lookup import build_line_index, split_key
from memsampler.collectors.policy import FREE_POLICY, UsedPolicy
from memsampler.collectors.values import SUFFIX_WIDTH, parse_value_from_line
from memsampler.errors import FileHandlingError, KeyMismatch, MalformedLine

MEMINFO_PATH = "/proc/meminfo"

# Source override, e.g. a fixture file on non-Linux dev machines
SOURCE_ENV = "MEMSAMPLER_SOURCE"


def resolve_source_path(path: Optional[str] = None) -> str:
    """
    Precedence: explicit path, then MEMSAMPLER_SOURCE, then /proc/meminfo
    """
    if path:
        return path
    return os.getenv(SOURCE_ENV) or MEMINFO_PATH


@dataclass
class MemStats:
    """
    Derived metrics, in the source's unit (kB)

    Owned by MemInfo and overwritten on every successful poll
    """

    total: int = 0
    free: int = 0
    used: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_kb": self.total,
            "free_kb": self.free,
            "used_kb": self.used,
        }


class MemInfo:
    """
    Incremental reader for a `Key: value kB` status file

    Construction opens the source, indexes the policy's keys and seeds the
    cache with zeros. Pass `stream` to read from an already open binary
    stream; the reader then leaves closing it to the caller.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        *,
        stream: Optional[BinaryIO] = None,
        policy: UsedPolicy = FREE_POLICY,
        suffix_width: int = SUFFIX_WIDTH,
        initial_buf_size: int = INITIAL_BUF_SIZE,
    ) -> None:
        self.policy = policy
        self.suffix_width = suffix_width
        self._buf = ReadBuffer(initial_buf_size)
        self._stats = MemStats()

        if stream is not None:
            self.path = path or getattr(stream, "name", "<stream>")
            self._file = stream
            self._owns_file = False
        else:
            self.path = resolve_source_path(path)
            try:
                self._file = open(self.path, "rb", buffering=0)
            except OSError as e:
                raise FileHandlingError(self.path, "open", str(e)) from e
            self._owns_file = True

        try:
            self._lookup = self._build_index()
        except Exception:
            self.close()
            raise

        self._cache: dict[str, int] = {key: 0 for key in self.policy.required_keys}

    # -----------------------------
    # Inspection
    # -----------------------------
    @property
    def required_keys(self) -> tuple[str, ...]:
        return self.policy.required_keys

    @property
    def lookup(self) -> dict[int, str]:
        return dict(self._lookup)

    @property
    def cache(self) -> dict[str, int]:
        return dict(self._cache)

    @property
    def buffer(self) -> ReadBuffer:
        return self._buf

    # -----------------------------
    # Polling
    # -----------------------------
    def stats(self) -> MemStats:
        """
        Poll once and return the reader's MemStats

        The returned object is reused; copy it (to_dict) to keep a sample.
        On any error the cache and stats keep their previous values.
        """
        staged: list[tuple[str, int]] = []

        try:
            self._fill()
            cursor = self._buf.cursor()
            last_pos = 0

            for n_line, key in self._lookup.items():
                line = cursor.advance(n_line - last_pos)
                last_pos = n_line

                found = split_key(line)
                if found is None:
                    raise MalformedLine(n_line, line)
                if found != key:
                    raise KeyMismatch(n_line, key, found)

                staged.append((key, parse_value_from_line(line, self.suffix_width)))
        finally:
            # drained on every path so the next fill starts at 0
            self._buf.drain()

        for key, value in staged:
            self._cache[key] = value

        self.policy.apply(self._cache, self._stats)
        return self._stats

    def reindex(self) -> dict[int, str]:
        """
        Rebuild the line index from the current source contents

        Cached values are kept. Raises MissingRequiredKey / MalformedLine if
        the source no longer carries every required key.
        """
        self._lookup = self._build_index()
        return self.lookup

    # -----------------------------
    # Resource handling
    # -----------------------------
    def close(self) -> None:
        if self._owns_file and not self._file.closed:
            self._file.close()

    def __enter__(self) -> "MemInfo":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _build_index(self) -> dict[int, str]:
        try:
            return build_line_index(self._file, self._buf, self.policy.required_keys)
        except OSError as e:
            raise FileHandlingError(self.path, "index", str(e)) from e

    def _fill(self) -> None:
        try:
            self._buf.fill(self._file)
            # rewind so the next poll reads from the start again
            self._file.seek(0)
        except OSError as e:
            raise FileHandlingError(self.path, "read", str(e)) from e
