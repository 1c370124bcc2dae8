"""Shared test fixtures for evstats package."""

import json
from datetime import datetime

import pytest

from evstats.events.models import RawEvent


@pytest.fixture
def sample_json_file(tmp_path):
    """Create a sample JSON file for testing."""
    data = {"key": "value", "number": 42}
    file_path = tmp_path / "sample.json"
    file_path.write_text(json.dumps(data))
    return file_path


@pytest.fixture
def mock_root(tmp_path, monkeypatch):
    """Create a mock project with a .evstats/ directory."""
    data_dir = tmp_path / ".evstats"
    data_dir.mkdir()
    (data_dir / "backups").mkdir()

    from evstats.core import config
    config.get_root.cache_clear()
    monkeypatch.setattr(config, "get_root", lambda: tmp_path)

    return tmp_path


@pytest.fixture
def make_event():
    """Factory fixture for RawEvent objects with sensible defaults."""
    counter = {"n": 0}

    def _make(
        event_type: str = "page_view",
        path: str | None = None,
        meta: dict | None = None,
        user_id: str | None = None,
        device_id: str | None = None,
        timestamp: datetime | None = None,
        event_id: str | None = None,
    ) -> RawEvent:
        counter["n"] += 1
        return RawEvent(
            id=event_id or f"evt-{counter['n']}",
            event_type=event_type,
            timestamp=timestamp or datetime(2024, 6, 15, 12, 0, 0),
            user_id=user_id,
            device_id=device_id,
            path=path,
            meta=meta,
        )

    return _make


@pytest.fixture
def events_db(mock_root):
    """Factory fixture writing raw rows into .evstats/events.json."""
    def _write(rows: list[dict]):
        db_path = mock_root / ".evstats" / "events.json"
        db_path.write_text(
            json.dumps({"_schema_version": "1.0", "events": rows}, indent=2),
            encoding="utf-8",
        )
        return db_path

    return _write
