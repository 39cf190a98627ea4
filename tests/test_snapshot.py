"""
Tests for the export envelope and import parsing.
"""

import json
import re

import pytest

# Path setup handled by conftest.py
from personadev.core import snapshot
from personadev.core.exceptions import InvalidInputError, MalformedSnapshotError
from personadev.core.models import AppState, Task


def test_utc_timestamp_format():
    assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", snapshot.utc_timestamp())


def test_envelope_wraps_data():
    data = AppState(streak=3).to_dict()
    envelope = snapshot.wrap_envelope(data)

    assert envelope["_format"] == "PersonaDev"
    assert envelope["_version"] == "2.0.0"
    assert envelope["_creator"] == "PersonaDev"
    assert envelope["_exportedAt"].endswith("Z")
    assert envelope["data"] == data
    assert snapshot.is_envelope(envelope)
    assert not snapshot.is_envelope(data)


def test_unwrap_accepts_raw_and_enveloped():
    data = AppState(streak=3).to_dict()
    assert snapshot.unwrap_snapshot(data) == data
    assert snapshot.unwrap_snapshot(snapshot.wrap_envelope(data)) == data

    with pytest.raises(MalformedSnapshotError):
        snapshot.unwrap_snapshot({"_format": "PersonaDev", "data": None})
    with pytest.raises(MalformedSnapshotError):
        snapshot.unwrap_snapshot("tasks")


def test_encode_export_formats():
    data = {"tasks": []}
    assert snapshot.encode_export(data, "json") == data
    assert snapshot.encode_export(data, "pdev")["data"] == data

    with pytest.raises(InvalidInputError, match="Invalid format 'xml'"):
        snapshot.encode_export(data, "xml")


def test_write_and_read_export(tmp_path):
    state = AppState(tasks=[Task(id="1", title="Meditate")], streak=2, last_check_in="2024-01-01")

    for fmt in ("json", "pdev"):
        path = snapshot.write_export(state, fmt, tmp_path)
        assert path.name.startswith("personadev-")
        assert path.suffix == f".{fmt}"
        assert snapshot.read_import(path) == state

    pdev = json.loads((tmp_path / snapshot.export_filename("pdev")).read_text())
    assert pdev["_format"] == "PersonaDev"


def test_read_import_errors(tmp_path):
    with pytest.raises(InvalidInputError):
        snapshot.read_import(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{nope", encoding="utf-8")
    with pytest.raises(MalformedSnapshotError):
        snapshot.read_import(bad)
