"""
Contract tests for the memsampler CLI driver
"""

import json
from pathlib import Path

from typer.testing import CliRunner

from memsampler.main import app

FIXTURE = Path(__file__).parent / "fixtures" / "meminfo.txt"


def _lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


def _events(output: str) -> list[str]:
    return [p["event_type"] for p in _lines(output) if "event_type" in p]


def _reports(output: str) -> list[dict]:
    return [p for p in _lines(output) if "memory" in p]


def test_oneshot_prints_one_report() -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["oneshot", "--source", str(FIXTURE)])

    assert result.exit_code == 0
    reports = _reports(result.stdout)
    assert len(reports) == 1
    assert reports[0]["memory"]["total_kb"] == 16303428
    assert reports[0]["memory"]["used_kb"] == 5948624
    assert reports[0]["timing"]["seq"] == 1
    assert _events(result.stdout) == [
        "sampler_start",
        "index_built",
        "sample_emitted",
        "sampler_shutdown",
    ]


def test_oneshot_reads_source_from_env() -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["oneshot"], env={"MEMSAMPLER_SOURCE": str(FIXTURE)})

    assert result.exit_code == 0
    assert len(_reports(result.stdout)) == 1


def test_oneshot_missing_key_exits_nonzero(tmp_path: Path) -> None:
    source = tmp_path / "meminfo"
    source.write_text("MemTotal:       16000 kB\n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, ["oneshot", "--source", str(source)])

    assert result.exit_code == 1
    failed = [p for p in _lines(result.stdout) if p.get("event_type") == "sample_failed"]
    assert failed[0]["stage"] == "index"
    assert failed[0]["error_type"] == "MissingRequiredKey"
    assert _reports(result.stdout) == []


def test_run_counts_polls() -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["run", "--source", str(FIXTURE), "--interval", "0", "--count", "3"],
    )

    assert result.exit_code == 0
    assert [r["timing"]["seq"] for r in _reports(result.stdout)] == [1, 2, 3]
    assert _events(result.stdout)[-1] == "sampler_shutdown"


def test_run_rebuilds_stale_index(tmp_path: Path, monkeypatch) -> None:
    """
    Reordered source -> sample_failed, index_rebuilt, sampling continues
    """
    source = tmp_path / "meminfo"
    original = FIXTURE.read_text(encoding="utf-8")
    source.write_text(original, encoding="utf-8")

    lines = original.splitlines(keepends=True)
    reordered = "".join([lines[1], lines[0], *lines[2:]])
    sleeps: list[float] = []

    def _fake_sleep(seconds: float) -> None:
        if not sleeps:
            source.write_text(reordered, encoding="utf-8")
        sleeps.append(seconds)

    monkeypatch.setattr("memsampler.main.time.sleep", _fake_sleep)
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["run", "--source", str(source), "--interval", "0", "--count", "3"],
    )

    assert result.exit_code == 0
    events = _events(result.stdout)
    assert "sample_failed" in events
    assert events.index("index_rebuilt") > events.index("sample_failed")

    reports = _reports(result.stdout)
    assert [r["timing"]["seq"] for r in reports] == [1, 2]
    assert reports[0]["memory"] == reports[1]["memory"]


def test_run_stops_when_reindex_fails(tmp_path: Path, monkeypatch) -> None:
    source = tmp_path / "meminfo"
    original = FIXTURE.read_text(encoding="utf-8")
    source.write_text(original, encoding="utf-8")

    def _fake_sleep(seconds: float) -> None:
        source.write_text(original.replace("MemFree:", "MemFrei:"), encoding="utf-8")

    monkeypatch.setattr("memsampler.main.time.sleep", _fake_sleep)
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["run", "--source", str(source), "--interval", "0", "--count", "5"],
    )

    assert result.exit_code == 1
    failed = [p for p in _lines(result.stdout) if p.get("event_type") == "sample_failed"]
    assert [p["stage"] for p in failed] == ["poll", "reindex"]
    assert failed[1]["error_type"] == "MissingRequiredKey"


def test_version_command() -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert result.stdout.startswith("memsampler v")


def test_run_reindexes_after_bad_value(tmp_path: Path, monkeypatch) -> None:
    """
    A value field that stops parsing -> sample_failed, index_rebuilt, keep running
    """
    source = tmp_path / "meminfo"
    original = FIXTURE.read_text(encoding="utf-8")
    source.write_text(original, encoding="utf-8")

    def _fake_sleep(seconds: float) -> None:
        source.write_text(original.replace("2113960 kB", "21x3960 kB"), encoding="utf-8")

    monkeypatch.setattr("memsampler.main.time.sleep", _fake_sleep)
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["run", "--source", str(source), "--interval", "0", "--count", "2"],
    )

    assert result.exit_code == 0
    events = _events(result.stdout)
    assert events.index("index_rebuilt") > events.index("sample_failed")

    failed = [p for p in _lines(result.stdout) if p.get("event_type") == "sample_failed"]
    assert failed[0]["error_type"] == "InvalidInteger"
    assert failed[0]["stale_index"] is False
    assert len(_reports(result.stdout)) == 1
