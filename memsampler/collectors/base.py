"""
memsampler.collectors.base
AUTHOR: carter-vin

Light result wrapper -> a bad poll is data for the driver loop, not a crash
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from memsampler.errors import SamplerError


@dataclass(frozen=True)
class PollOutcome:
    """
    Normalized poll result
    - ok: false=failure, error details in error fields
    - value: poll result if ok=true
    - recoverable: whether the same reader may keep polling
    """

    name: str
    ok: bool
    value: Optional[Any] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    recoverable: bool = True
    error: Optional[SamplerError] = None


def run_poll(name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> PollOutcome:
    """
    Run a poll & capture SamplerError as an outcome

    Anything that is not a SamplerError is a defect and propagates
    """
    try:
        v = fn(*args, **kwargs)
        return PollOutcome(name=name, ok=True, value=v)
    except SamplerError as e:
        return PollOutcome(
            name=name,
            ok=False,
            error_type=type(e).__name__,
            error_message=str(e),
            recoverable=e.recoverable,
            error=e,
        )
