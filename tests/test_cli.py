"""Tests for the top-level evstats CLI."""

import json

import pytest
from click.testing import CliRunner

from evstats import __version__
from evstats.cli import main


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_groups(runner):
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    for group in ("events", "analytics", "config", "init"):
        assert group in result.output


def test_init_creates_data_dir(runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".gitignore").write_text("node_modules/\n")

    result = runner.invoke(main, ["init"])

    assert result.exit_code == 0
    assert (tmp_path / ".evstats" / "backups").is_dir()
    assert ".evstats/backups/" in (tmp_path / ".gitignore").read_text()


def test_init_existing_without_force(runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".evstats").mkdir()

    result = runner.invoke(main, ["init"])

    assert result.exit_code == 0
    assert "already exists" in result.output
    assert not (tmp_path / ".evstats" / "backups").exists()


def test_init_dry_run(runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(main, ["--dry-run", "init"])

    assert result.exit_code == 0
    assert "DRY RUN" in result.output
    assert not (tmp_path / ".evstats").exists()


def test_track_then_summarize(runner, mock_root):
    """Events recorded through the CLI show up in the summary."""
    runner.invoke(main, ["events", "track", "page-view", "/home", "--user", "alice"])
    runner.invoke(main, ["events", "track", "page-view", "/home"])
    runner.invoke(main, ["events", "track", "search", "E42", "--brand", "Acme"])
    runner.invoke(main, ["events", "track", "error-code", "F01", "boiler"])

    result = runner.invoke(main, ["analytics", "summary", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["totalPageViews"] == 4
    assert data["pageViews"] == [{"path": "/home", "count": 2}]
    assert data["topSearchedCodes"] == [{"code": "E42", "count": 1}]
    assert data["totalSearches"] == 1
    assert data["topBrands"] == [{"brand": "Acme", "count": 1}]
    assert data["topUsers"] == [{"userId": "alice", "count": 1}]
    assert data["errorCodeFrequency"] == [{"code": "F01", "count": 1}]
    assert sum(h["count"] for h in data["activityByHour"]) == 4


def test_dry_run_track_writes_nothing(runner, mock_root):
    result = runner.invoke(main, ["--dry-run", "events", "track", "page-view", "/x"])

    assert result.exit_code == 0
    assert "Would record" in result.output
    assert not (mock_root / ".evstats" / "events.json").exists()
    assert not (mock_root / ".evstats" / "config.yaml").exists()


def test_dry_run_config_set_writes_nothing(runner, mock_root):
    result = runner.invoke(main, ["--dry-run", "config", "set", "analytics.default_days", "7"])

    assert result.exit_code == 0
    assert "Would set" in result.output
    assert not (mock_root / ".evstats" / "config.yaml").exists()
