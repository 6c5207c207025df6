"""
memsampler.main
------------
AUTHOR: carter-vin

Thin driver around the sampled meminfo reader:
- `memsampler version` prints version and runtime env
- `memsampler oneshot` polls once and prints one sample report
- `memsampler run` polls on an interval, reindexing after a stale line or bad value

Cadence, retry and output live here; the reader only reads.
"""

from __future__ import annotations

import platform
import sys
import time
from typing import Optional

import typer

from memsampler import AGENT_VERSION
from memsampler.collectors.base import run_poll
from memsampler.collectors.meminfo import MemInfo, MemStats
from memsampler.errors import SamplerError, StaleIndexError, ValueParseError
from memsampler.logging import emit_event, emit_poll_failure, utc_now_iso
from memsampler.model import build_sample_report, report_to_json

app = typer.Typer(
    add_completion=False,
    help="memsampler: sampled /proc/meminfo reader",
)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """
    Root command behavior: hint when no subcommand is given
    """
    if ctx.invoked_subcommand is None:
        typer.echo("No command provided. Try: memsampler --help")


# -----------------------------
# HELPERS
# -----------------------------
def _open_reader(source: Optional[str], *, mode: str) -> MemInfo:
    """
    Build the reader or exit 1; construction failure means no polling
    """
    try:
        reader = MemInfo(source)
    except SamplerError as e:
        emit_event(
            "sample_failed",
            agent_version=AGENT_VERSION,
            mode=mode,
            stage="index",
            error_type=type(e).__name__,
            message=str(e),
        )
        raise typer.Exit(code=1)

    emit_event(
        "index_built",
        agent_version=AGENT_VERSION,
        mode=mode,
        source=reader.path,
        lines=sorted(reader.lookup),
    )
    return reader


def _emit_sample(stats: MemStats, *, reader: MemInfo, seq: int, mode: str) -> None:
    report = build_sample_report(
        stats,
        emitted_at=utc_now_iso(),
        seq=seq,
        agent_version=AGENT_VERSION,
        policy=reader.policy.name,
    )
    report_json = report_to_json(report)
    typer.echo(report_json)

    emit_event(
        "sample_emitted",
        agent_version=AGENT_VERSION,
        mode=mode,
        seq=seq,
        bytes=len(report_json),
    )


# -----------------------------
# CLI COMMANDS
# -----------------------------
@app.command()
def version() -> None:
    """
    Print version & runtime env
    """
    typer.echo(f"memsampler v{AGENT_VERSION}")
    typer.echo(f"python={sys.version.split()[0]}")
    typer.echo(f"os={platform.system()} {platform.release()}")
    typer.echo(f"machine={platform.machine()}")
    typer.echo(f"utc_now={utc_now_iso()}")


@app.command("oneshot")
def oneshot(
    source: Optional[str] = typer.Option(
        None,
        help="Status file to read (default: $MEMSAMPLER_SOURCE or /proc/meminfo).",
    ),
) -> None:
    """
    Poll once, print the sample report, exit

    Failure semantics:
    - index or poll failure exits 1
    """
    emit_event("sampler_start", agent_version=AGENT_VERSION, mode="oneshot")

    try:
        with _open_reader(source, mode="oneshot") as reader:
            outcome = run_poll("meminfo", reader.stats)
            if not outcome.ok:
                emit_poll_failure(
                    outcome,
                    agent_version=AGENT_VERSION,
                    mode="oneshot",
                    stage="poll",
                )
                raise typer.Exit(code=1)

            _emit_sample(outcome.value, reader=reader, seq=1, mode="oneshot")
    finally:
        emit_event("sampler_shutdown", agent_version=AGENT_VERSION, mode="oneshot")


@app.command("run")
def run(
    source: Optional[str] = typer.Option(
        None,
        help="Status file to read (default: $MEMSAMPLER_SOURCE or /proc/meminfo).",
    ),
    interval: float = typer.Option(
        5.0,
        help="Seconds between polls.",
        min=0.0,
    ),
    count: int = typer.Option(
        0,
        help="Number of polls before exiting (0 = run until interrupted).",
        min=0,
    ),
) -> None:
    """
    Run continuous sampling loop

    Failure semantics:
    - stale index or bad value -> sample_failed, reindex once, keep running
    - other recoverable errors -> sample_failed, skip this poll
    - file errors or a failed reindex -> exit 1
    """
    emit_event(
        "sampler_start",
        agent_version=AGENT_VERSION,
        mode="run",
        interval_s=interval,
        count=count,
    )

    try:
        with _open_reader(source, mode="run") as reader:
            seq = 0
            polls = 0

            while count == 0 or polls < count:
                start = time.monotonic()
                polls += 1

                outcome = run_poll("meminfo", reader.stats)
                if outcome.ok:
                    seq += 1
                    _emit_sample(outcome.value, reader=reader, seq=seq, mode="run")
                else:
                    emit_poll_failure(
                        outcome,
                        agent_version=AGENT_VERSION,
                        mode="run",
                        stage="poll",
                    )
                    if not outcome.recoverable:
                        raise typer.Exit(code=1)

                    if isinstance(outcome.error, (StaleIndexError, ValueParseError)):
                        rebuilt = run_poll("reindex", reader.reindex)
                        if not rebuilt.ok:
                            emit_poll_failure(
                                rebuilt,
                                agent_version=AGENT_VERSION,
                                mode="run",
                                stage="reindex",
                            )
                            raise typer.Exit(code=1)
                        emit_event(
                            "index_rebuilt",
                            agent_version=AGENT_VERSION,
                            mode="run",
                            lines=sorted(rebuilt.value),
                        )

                if count and polls >= count:
                    break

                elapsed = time.monotonic() - start
                time.sleep(max(0.0, interval - elapsed))

    except KeyboardInterrupt:
        # Graceful shutdown on Ctrl+C
        pass

    finally:
        emit_event("sampler_shutdown", agent_version=AGENT_VERSION, mode="run")


if __name__ == "__main__":
    app()
