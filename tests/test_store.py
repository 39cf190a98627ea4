"""
Tests for SheetStore against an in-memory spreadsheet double.
"""

import gspread
import pytest
import requests

# Path setup handled by conftest.py
from personadev.core.constants import (
    APP_DATA_HEADERS,
    SHEET_APP_DATA,
    SHEET_SYNC_LOG,
    SYNC_LOG_HEADERS,
)
from personadev.core.exceptions import MalformedSnapshotError, RemoteWriteFailureError
from personadev.relay.store import LogRow, SheetStore, SnapshotRow


class FakeWorksheet:
    def __init__(self, title, rows=None):
        self.title = title
        self.rows = [list(row) for row in rows or []]
        self.input_options = []

    def append_row(self, row, value_input_option=None):
        self.input_options.append(value_input_option)
        self.rows.append(list(row))

    def get_all_values(self):
        return [list(row) for row in self.rows]


class FakeSpreadsheet:
    def __init__(self, worksheets=None):
        self.worksheets = dict(worksheets or {})
        self.created = []

    def worksheet(self, title):
        if title not in self.worksheets:
            raise gspread.exceptions.WorksheetNotFound(title)
        return self.worksheets[title]

    def add_worksheet(self, title, rows, cols):
        self.created.append((title, rows, cols))
        sheet = FakeWorksheet(title)
        self.worksheets[title] = sheet
        return sheet


class FailingWorksheet(FakeWorksheet):
    def __init__(self, title, error):
        super().__init__(title, [APP_DATA_HEADERS])
        self.error = error

    def append_row(self, row, value_input_option=None):
        raise self.error

    def get_all_values(self):
        raise self.error


def store_with(**sheets):
    spreadsheet = FakeSpreadsheet({
        title: FakeWorksheet(title, rows) for title, rows in sheets.items()
    })
    return SheetStore(spreadsheet), spreadsheet


def test_creates_sheets_with_header_row():
    spreadsheet = FakeSpreadsheet()
    store = SheetStore(spreadsheet)

    store.append_snapshot("2024-01-01T10:00:00.000Z", "full_sync", {"streak": 1})
    store.append_log("2024-01-01T10:00:00.000Z", "sync", "web", "success")

    assert [title for title, _, _ in spreadsheet.created] == [SHEET_APP_DATA, SHEET_SYNC_LOG]
    assert spreadsheet.created[0][2] == len(APP_DATA_HEADERS)
    assert spreadsheet.worksheets[SHEET_APP_DATA].rows[0] == APP_DATA_HEADERS
    assert spreadsheet.worksheets[SHEET_SYNC_LOG].rows[0] == SYNC_LOG_HEADERS
    assert spreadsheet.worksheets[SHEET_APP_DATA].rows[1] == [
        "2024-01-01T10:00:00.000Z",
        "full_sync",
        '{"streak": 1}',
    ]
    assert set(spreadsheet.worksheets[SHEET_APP_DATA].input_options) == {"RAW"}


def test_existing_sheet_is_reused():
    store, spreadsheet = store_with(**{SHEET_APP_DATA: [APP_DATA_HEADERS]})
    store.append_snapshot("t1", "full_sync", {})
    store.append_snapshot("t2", "full_sync", {})

    assert spreadsheet.created == []
    assert len(spreadsheet.worksheets[SHEET_APP_DATA].rows) == 3


def test_latest_snapshot_skips_header_row():
    store, _ = store_with(**{SHEET_APP_DATA: [APP_DATA_HEADERS]})
    assert store.latest_snapshot() is None


def test_latest_snapshot_on_new_sheet():
    store = SheetStore(FakeSpreadsheet())
    assert store.latest_snapshot() is None


def test_latest_snapshot_is_last_row():
    store, _ = store_with(**{SHEET_APP_DATA: [
        APP_DATA_HEADERS,
        ["t1", "full_sync", '{"streak": 1}'],
        ["t2", "import", '{"streak": 2}'],
    ]})
    assert store.latest_snapshot() == SnapshotRow(timestamp="t2", data_type="import", data={"streak": 2})


@pytest.mark.parametrize("row", [["t1", "full_sync", ""], ["t1", "full_sync"], ["t1"]])
def test_latest_snapshot_without_json_is_none(row):
    store, _ = store_with(**{SHEET_APP_DATA: [APP_DATA_HEADERS, row]})
    assert store.latest_snapshot() is None


def test_latest_snapshot_invalid_json():
    store, _ = store_with(**{SHEET_APP_DATA: [APP_DATA_HEADERS, ["t1", "full_sync", "{broken"]]})
    with pytest.raises(MalformedSnapshotError, match="t1"):
        store.latest_snapshot()


def test_history_most_recent_first_with_short_rows():
    store, _ = store_with(**{SHEET_SYNC_LOG: [
        SYNC_LOG_HEADERS,
        ["t1", "sync", "web", "success"],
        ["t2", "import"],
    ]})
    assert store.history() == [
        LogRow("t2", "import", "", ""),
        LogRow("t1", "sync", "web", "success"),
    ]


def test_history_empty_sheet():
    store, _ = store_with(**{SHEET_SYNC_LOG: [SYNC_LOG_HEADERS]})
    assert store.history() == []


@pytest.mark.parametrize(
    "error",
    [
        requests.exceptions.ConnectionError("connection reset"),
        gspread.exceptions.GSpreadException("quota exceeded"),
    ],
)
def test_sheet_errors_become_remote_write_failures(error):
    spreadsheet = FakeSpreadsheet({SHEET_APP_DATA: FailingWorksheet(SHEET_APP_DATA, error)})
    store = SheetStore(spreadsheet)

    with pytest.raises(RemoteWriteFailureError, match="snapshot append"):
        store.append_snapshot("t1", "full_sync", {})
    with pytest.raises(RemoteWriteFailureError, match="snapshot read"):
        store.latest_snapshot()


def test_sheet_open_error_becomes_remote_write_failure():
    class Unreachable(FakeSpreadsheet):
        def worksheet(self, title):
            raise requests.exceptions.Timeout("read timed out")

    store = SheetStore(Unreachable())
    with pytest.raises(RemoteWriteFailureError, match=SHEET_SYNC_LOG):
        store.append_log("t1", "sync", "web", "success")
