"""
memsampler.logging
AUTHOR: carter-vin

Structured JSON event logging for the sampler driver

Contract:
- One JSON object per line to stdout
- Stable event vocabulary (allowlist)
- UTC timestamps only
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from memsampler.collectors.base import PollOutcome
from memsampler.errors import StaleIndexError

# Event types
VALID_EVENT_TYPES = {
    "sampler_start",
    "index_built",
    "sample_emitted",
    "sample_failed",
    "index_rebuilt",
    "sampler_shutdown",
}


def _truncate_message(value: str, *, limit: int = 200) -> str:
    """
    Cap message length to keep events compact
    """
    if len(value) <= limit:
        return value
    return value[:limit] + f"...[truncated {len(value) - limit} chars]"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def emit_event(event_type: str, *, agent_version: str, **fields: Any) -> None:
    """
    Emit structured event line to stdout

    Rules:
    - event_type in VALID_EVENT_TYPES
    - event_type, agent_version, utc_now always present
    - sort_keys + compact separators for format
    """
    if event_type not in VALID_EVENT_TYPES:
        raise ValueError(f"invalid event_type: {event_type}")

    if "message" in fields and isinstance(fields["message"], str):
        fields["message"] = _truncate_message(fields["message"])

    payload: dict[str, Any] = {
        "event_type": event_type,
        "utc_now": utc_now_iso(),
        "agent_version": agent_version,
        **fields,
    }

    print(
        json.dumps(
            payload,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
    )


def emit_poll_failure(
    outcome: PollOutcome,
    *,
    agent_version: str,
    mode: str,
    stage: str,
) -> None:
    """
    Emit sample_failed for a failed PollOutcome

    stage: "poll" | "reindex"
    - stale_index: the failure means cached line positions no longer match
    """
    if outcome.ok:
        raise ValueError(f"outcome {outcome.name} did not fail")

    emit_event(
        "sample_failed",
        agent_version=agent_version,
        mode=mode,
        stage=stage,
        collector=outcome.name,
        error_type=outcome.error_type,
        message=outcome.error_message,
        recoverable=outcome.recoverable,
        stale_index=isinstance(outcome.error, StaleIndexError),
    )
