"""
memsampler.errors
AUTHOR: carter-vin

Error taxonomy for the meminfo reader

Contract:
- Every data-dependent failure is a SamplerError subclass
- `recoverable` tells the driver loop whether the same reader can keep polling
- I/O failures are chained (`raise ... from e`) so the OSError stays visible
"""

from __future__ import annotations


class SamplerError(Exception):
    """
    Base class for all reader failures
    """

    recoverable = True


class FileHandlingError(SamplerError):
    """
    Open/read/seek failed on the source
    """

    recoverable = False

    def __init__(self, path: str, operation: str, reason: str = "") -> None:
        self.path = path
        self.operation = operation
        detail = f": {reason}" if reason else ""
        super().__init__(f"{operation} failed for {path}{detail}")


class MissingRequiredKey(SamplerError):
    """
    A required key is absent from the source (construction/reindex only)
    """

    recoverable = False

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"required key missing from source: {key}")


class UnexpectedFormat(SamplerError):
    """
    Source content violates the `Key: value unit` line grammar
    """


class MalformedLine(UnexpectedFormat):
    def __init__(self, line_number: int, line: str) -> None:
        self.line_number = line_number
        self.line = line
        super().__init__(f"line {line_number} has no ':' delimiter: {line!r}")


class ValueParseError(UnexpectedFormat):
    """
    A selected line failed numeric extraction
    """

    reason = "value parse failed"

    def __init__(self, line: str) -> None:
        self.line = line
        super().__init__(f"{self.reason}: {line!r}")


class LineTooShort(ValueParseError):
    reason = "line shorter than unit suffix"


class NoWhitespaceBoundary(ValueParseError):
    reason = "no whitespace before value field"


class InvalidInteger(ValueParseError):
    reason = "value field is not a non-negative integer"


class StaleIndexError(UnexpectedFormat):
    """
    Cached line positions no longer match the source

    The reader can recover by rebuilding its index (MemInfo.reindex)
    """


class LineCountChanged(StaleIndexError):
    def __init__(self, line_number: int) -> None:
        self.line_number = line_number
        super().__init__(f"source ended before indexed line {line_number}")


class KeyMismatch(StaleIndexError):
    def __init__(self, line_number: int, expected: str, found: str) -> None:
        self.line_number = line_number
        self.expected = expected
        self.found = found
        super().__init__(
            f"line {line_number} holds {found!r}, index expected {expected!r}"
        )
