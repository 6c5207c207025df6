"""
memsampler.model
AUTHOR: carter-vin

Sample report envelope + deterministic serialization

Design goals:
- Versioned envelope ("schema_version" = "1")
- Explicit structure (no accidental serialization via __dict__)
- Snapshot copies values out of the reader's reused MemStats
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from memsampler.collectors.meminfo import MemStats

SCHEMA_VERSION = "1"


@dataclass(frozen=True)
class Timing:
    """
    - emitted_at: ISO 8601 UTC
    - seq: 1-based sample counter for this process
    """

    emitted_at: str
    seq: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "emitted_at": self.emitted_at,
            "seq": self.seq,
        }


@dataclass(frozen=True)
class Meta:
    schema_version: str
    agent_version: str
    policy: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "agent_version": self.agent_version,
            "policy": self.policy,
        }


@dataclass(frozen=True)
class SampleReport:
    memory: dict[str, int]
    timing: Timing
    meta: Meta

    def to_dict(self) -> dict[str, Any]:
        return {
            "memory": dict(self.memory),
            "timing": self.timing.to_dict(),
            "meta": self.meta.to_dict(),
        }


def validate_report(report: SampleReport) -> None:
    """
    Raises ValueError on invalid report
    """
    if report.timing.seq < 1:
        raise ValueError("timing.seq must be >= 1")
    if not report.timing.emitted_at:
        raise ValueError("timing.emitted_at is empty")
    if set(report.memory.keys()) != {"total_kb", "free_kb", "used_kb"}:
        raise ValueError("memory must hold total_kb, free_kb, used_kb")
    if report.meta.schema_version != SCHEMA_VERSION:
        raise ValueError(f"meta.schema_version must be: '{SCHEMA_VERSION}'")
    if not report.meta.agent_version:
        raise ValueError("meta.agent_version must be non-empty")


def build_sample_report(
    stats: MemStats,
    *,
    emitted_at: str,
    seq: int,
    agent_version: str,
    policy: str,
) -> SampleReport:
    report = SampleReport(
        memory=stats.to_dict(),
        timing=Timing(emitted_at=emitted_at, seq=seq),
        meta=Meta(
            schema_version=SCHEMA_VERSION,
            agent_version=agent_version,
            policy=policy,
        ),
    )

    validate_report(report)
    return report


def report_to_json(report: SampleReport) -> str:
    """
    Single JSON object string, stable key order, no whitespace
    """
    return json.dumps(
        report.to_dict(),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
