"""Shared pytest configuration and fixtures for tests."""

import sys
import io
from pathlib import Path

import pytest

# Fix Windows console encoding
if sys.platform == "win32":
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from personadev.core import repository  # noqa: E402
from personadev.relay.store import LogRow, SnapshotRow  # noqa: E402


@pytest.fixture(autouse=True)
def temp_db(monkeypatch, tmp_path):
    """Use temporary database for all tests."""
    db_path = tmp_path / "test_personadev.db"
    monkeypatch.setattr(repository, "DB_PATH", db_path)
    monkeypatch.setattr(repository, "DB_DIR", tmp_path)
    yield db_path


class MemoryStore:
    """In-memory stand-in for SheetStore, keeping rows in append order."""

    def __init__(self):
        self.snapshots = []
        self.logs = []

    def append_snapshot(self, timestamp, data_type, data):
        self.snapshots.append(SnapshotRow(timestamp=timestamp, data_type=data_type, data=data))

    def latest_snapshot(self):
        return self.snapshots[-1] if self.snapshots else None

    def append_log(self, timestamp, action, device, status):
        self.logs.append(LogRow(timestamp, action, device, status))

    def history(self):
        return list(reversed(self.logs))


@pytest.fixture
def memory_store():
    return MemoryStore()
