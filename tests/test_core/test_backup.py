"""Tests for evstats.core.backup module."""

import json
import os
from datetime import datetime, timedelta

import pytest

from evstats.core.backup import (
    TIMESTAMP_FORMAT,
    cleanup_old_backups,
    create_backup,
    parse_backup_timestamp,
    safe_write_json,
)


def _fake_backup(backup_dir, stem, when: datetime):
    backup_dir.mkdir(parents=True, exist_ok=True)
    path = backup_dir / f"{stem}_{when.strftime(TIMESTAMP_FORMAT)}.json"
    path.write_text("{}")
    return path


class TestCreateBackup:
    """Tests for create_backup function."""

    def test_backup_preserves_content(self, sample_json_file, tmp_path):
        backup_path = create_backup(sample_json_file, tmp_path / "backups")

        assert backup_path.parent == tmp_path / "backups"
        assert backup_path.name.startswith("sample_")
        assert json.loads(backup_path.read_text()) == json.loads(sample_json_file.read_text())

    def test_raises_for_nonexistent_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            create_backup(tmp_path / "nonexistent.json", tmp_path / "backups")

    def test_timestamp_parseable(self, sample_json_file, tmp_path):
        backup_path = create_backup(sample_json_file, tmp_path / "backups")
        assert parse_backup_timestamp(backup_path.name) is not None


class TestParseBackupTimestamp:
    def test_valid(self):
        result = parse_backup_timestamp("events_20251212_144234_000123.json")
        assert result == datetime(2025, 12, 12, 14, 42, 34, 123)

    @pytest.mark.parametrize("name", ["events.json", "events_2025_1.json", "events_20251399_999999_000000.json"])
    def test_invalid(self, name):
        assert parse_backup_timestamp(name) is None


class TestCleanupOldBackups:
    """Tests for cleanup_old_backups function."""

    def test_keeps_newest_by_count(self, tmp_path):
        backup_dir = tmp_path / "backups"
        now = datetime.now()
        paths = [_fake_backup(backup_dir, "events", now - timedelta(minutes=i)) for i in range(5)]

        removed = cleanup_old_backups(backup_dir, "events", keep_last=2, keep_days=None)

        assert sorted(removed) == sorted(paths[2:])
        assert all(p.exists() for p in paths[:2])

    def test_age_limit_spares_recent(self, tmp_path):
        backup_dir = tmp_path / "backups"
        now = datetime.now()
        recent = [_fake_backup(backup_dir, "events", now - timedelta(hours=i)) for i in range(3)]
        old = _fake_backup(backup_dir, "events", now - timedelta(days=60))

        removed = cleanup_old_backups(backup_dir, "events", keep_last=1, keep_days=30)

        assert removed == [old]
        assert all(p.exists() for p in recent)

    def test_other_databases_untouched(self, tmp_path):
        backup_dir = tmp_path / "backups"
        other = _fake_backup(backup_dir, "other", datetime.now() - timedelta(days=90))

        cleanup_old_backups(backup_dir, "events", keep_last=0, keep_days=None)

        assert other.exists()

    def test_missing_dir(self, tmp_path):
        assert cleanup_old_backups(tmp_path / "nope", "events") == []


class TestSafeWriteJson:
    """Tests for safe_write_json function."""

    def test_writes_json(self, tmp_path):
        target = tmp_path / "out.json"
        assert safe_write_json(target, {"a": [1, 2]}) is None
        assert json.loads(target.read_text()) == {"a": [1, 2]}
        assert target.read_text().endswith("\n")

    def test_creates_parent_dir(self, tmp_path):
        target = tmp_path / "deep" / "out.json"
        safe_write_json(target, {})
        assert target.exists()

    def test_backs_up_existing(self, sample_json_file, tmp_path):
        backup_path = safe_write_json(sample_json_file, {"new": True}, backup_dir=tmp_path / "bk")

        assert backup_path is not None
        assert json.loads(backup_path.read_text()) == {"key": "value", "number": 42}
        assert json.loads(sample_json_file.read_text()) == {"new": True}

    def test_unserializable_raises_and_keeps_file(self, sample_json_file):
        before = sample_json_file.read_text()
        with pytest.raises(ValueError):
            safe_write_json(sample_json_file, {"bad": object()})
        assert sample_json_file.read_text() == before

    def test_no_temp_files_left(self, tmp_path):
        safe_write_json(tmp_path / "out.json", {"x": 1})
        assert [p for p in os.listdir(tmp_path) if p.startswith(".out.json.")] == []
