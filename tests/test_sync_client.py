"""
Tests for SyncClient push/pull behaviour and the RelayApi transport.
"""

import asyncio
import sqlite3

import httpx
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

# Path setup handled by conftest.py
from personadev.config import RelayConfig
from personadev.core import repository, service
from personadev.core.exceptions import MalformedSnapshotError, NetworkFailureError
from personadev.core.models import AppState, Book, Task
from personadev.core.sync import RelayApi, SyncClient, SyncStatus, detect_device
from personadev.relay import create_app


def stored_document(db_path):
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute("SELECT value FROM documents").fetchone()[0]
    finally:
        conn.close()


class FakeApi:
    """Relay double returning canned bodies."""

    def __init__(self, sync_body=None, push_body=None):
        self.sync_body = sync_body or {"success": True, "data": None, "message": "No data found"}
        self.push_body = push_body or {"success": True, "timestamp": "2024-01-01T10:00:00.000Z"}
        self.pushed = []

    async def post_sync(self, data, device):
        self.pushed.append((data, device))
        return self.push_body

    async def get_sync(self):
        return self.sync_body


class GatedApi(FakeApi):
    """Holds post_sync open until released."""

    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()

    async def post_sync(self, data, device):
        self.pushed.append((data, device))
        await self.gate.wait()
        return self.push_body


class RelayBridge:
    """Talks to an in-process relay app over ASGI."""

    def __init__(self, http):
        self.http = http

    async def post_sync(self, data, device):
        response = await self.http.post("/api/sync", json={"data": data, "device": device})
        return response.json()

    async def get_sync(self):
        response = await self.http.get("/api/sync")
        return response.json()


def test_second_push_while_in_flight_is_ignored():
    state = AppState(tasks=[Task(id="1", title="Meditate")])

    async def scenario():
        api = GatedApi()
        client = SyncClient(api, replace=lambda s: s)

        first = asyncio.ensure_future(client.push(state, "web"))
        await asyncio.sleep(0)
        assert client.status is SyncStatus.SYNCING

        assert await client.push(state, "web") is None
        assert await client.pull() is None

        api.gate.set()
        result = await first
        return api, client, result

    api, client, result = asyncio.run(scenario())
    assert len(api.pushed) == 1
    assert result.ok
    assert client.status is SyncStatus.SUCCESS
    assert client.last_sync_time is not None


def test_push_serializes_state_at_call_time():
    state = AppState(tasks=[Task(id="1", title="Meditate")])
    api = FakeApi()
    client = SyncClient(api, replace=lambda s: s)

    asyncio.run(client.push(state, "android"))
    state.tasks.append(Task(id="2", title="Later"))

    data, device = api.pushed[0]
    assert [t["id"] for t in data["tasks"]] == ["1"]
    assert device == "android"


def test_push_failure_sets_error():
    api = FakeApi(push_body={"success": False, "error": "Spreadsheet snapshot append failed"})
    client = SyncClient(api, replace=lambda s: s)

    result = asyncio.run(client.push(AppState(), "web"))
    assert not result.ok
    assert client.status is SyncStatus.ERROR
    assert client.message == "Spreadsheet snapshot append failed"


def test_push_without_timestamp_is_error():
    api = FakeApi(push_body={"success": True})
    client = SyncClient(api, replace=lambda s: s)

    result = asyncio.run(client.push(AppState(), "web"))
    assert not result.ok
    assert client.status is SyncStatus.ERROR


def test_status_reverts_to_idle():
    async def scenario():
        client = SyncClient(FakeApi(), replace=lambda s: s, success_display=0.01, error_display=0.01)
        await client.push(AppState(), "web")
        assert client.status is SyncStatus.SUCCESS
        await asyncio.sleep(0.05)
        return client

    client = asyncio.run(scenario())
    assert client.status is SyncStatus.IDLE
    assert client.message is None


def test_pull_with_no_data_leaves_local_state(temp_db):
    service.add_task("Meditate")
    before = stored_document(temp_db)

    client = SyncClient(FakeApi())
    result = asyncio.run(client.pull())

    assert result.ok
    assert result.state is None
    assert client.status is SyncStatus.IDLE
    assert stored_document(temp_db) == before


def test_pull_replaces_local_state_entirely():
    service.add_task("Local A")
    service.add_task("Local B")
    service.add_book("Local book")

    remote = AppState(tasks=[Task(id="9", title="Remote")], streak=4, last_check_in="2023-12-31")
    api = FakeApi(sync_body={"success": True, "data": remote.to_dict(), "timestamp": "2024-01-01T10:00:00.000Z"})
    client = SyncClient(api)

    result = asyncio.run(client.pull())
    assert result.ok
    assert result.state == remote

    local = service.load()
    assert [t.title for t in local.tasks] == ["Remote"]
    assert local.books == []
    assert local.streak == 4
    assert client.last_sync_time.year == 2024


def test_pull_malformed_snapshot_keeps_local_state():
    service.add_task("Local")
    api = FakeApi(sync_body={"success": True, "data": {"tasks": "broken"}})
    client = SyncClient(api)

    result = asyncio.run(client.pull())
    assert not result.ok
    assert client.status is SyncStatus.ERROR
    assert [t.title for t in service.load().tasks] == ["Local"]


def test_pull_local_write_failure_sets_error():
    remote = AppState(tasks=[Task(id="9", title="Remote")])
    api = FakeApi(sync_body={"success": True, "data": remote.to_dict(), "timestamp": "2024-01-01T10:00:00.000Z"})

    written = []

    def locked_once(state):
        if not written:
            written.append(None)
            raise sqlite3.OperationalError("database is locked")
        written.append(state)

    client = SyncClient(api, replace=locked_once)

    result = asyncio.run(client.pull())
    assert not result.ok
    assert "database is locked" in result.error
    assert client.status is SyncStatus.ERROR

    # Not left in syncing, so the next pull runs
    assert asyncio.run(client.pull()).ok
    assert written[-1] == remote


def test_pull_unopenable_database_sets_error(monkeypatch):
    remote = AppState(tasks=[Task(id="9", title="Remote")])
    api = FakeApi(sync_body={"success": True, "data": remote.to_dict(), "timestamp": "2024-01-01T10:00:00.000Z"})

    def unavailable():
        raise sqlite3.OperationalError("unable to open database file")

    monkeypatch.setattr(repository, "get_connection", unavailable)
    client = SyncClient(api)

    result = asyncio.run(client.pull())
    assert not result.ok
    assert client.status is SyncStatus.ERROR
    assert "database" in client.message


def test_push_then_pull_round_trip(tmp_path, memory_store):
    credentials = tmp_path / "credentials.json"
    credentials.write_text("{}", encoding="utf-8")
    app = create_app(RelayConfig(spreadsheet_id="sheet", credentials_path=credentials), store=memory_store)

    state = AppState(
        tasks=[Task(id="1", title="Meditate", importance="high")],
        daily_checkins={"2024-01-01": {"1": True}},
        books=[Book(id="2", title="Dune", pages_read=40, logs={"2024-01-01": {"duration": 30}})],
        screen_time={"2024-01-01": 95},
        streak=6,
        last_check_in="2024-01-01",
    )
    pulled = []

    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://relay") as http:
            client = SyncClient(RelayBridge(http), replace=pulled.append)
            pushed = await client.push(state, "web")
            fetched = await client.pull()
            return pushed, fetched

    pushed, fetched = asyncio.run(scenario())
    assert pushed.ok
    assert fetched.ok
    assert fetched.state == state
    assert pulled == [state]
    assert fetched.timestamp == pushed.timestamp


@pytest.mark.parametrize(
    "user_agent, expected",
    [
        ("Mozilla/5.0 (Linux; Android 14; Pixel 8)", "android"),
        ("Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)", "ios"),
        ("Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X)", "ios"),
        ("Mozilla/5.0 (X11; Linux x86_64) Mobile Safari", "mobile"),
        ("Mozilla/5.0 (Windows NT 10.0; Win64; x64)", "web"),
    ],
)
def test_detect_device(user_agent, expected):
    assert detect_device(user_agent) == expected


def test_detect_device_override(monkeypatch):
    monkeypatch.setenv("PERSONADEV_USER_AGENT", "Android 13")
    assert detect_device() == "android"


async def _serve(handlers):
    app = web.Application()
    for method, path, handler in handlers:
        app.router.add_route(method, path, handler)
    server = TestServer(app)
    await server.start_server()
    return server


def test_relay_api_requests():
    seen = {}

    async def post_sync(request):
        seen["body"] = await request.json()
        return web.json_response({"success": True, "timestamp": "2024-01-01T00:00:00.000Z"})

    async def get_history(request):
        return web.json_response({"success": True, "history": []})

    async def scenario():
        server = await _serve([("POST", "/api/sync", post_sync), ("GET", "/api/sync/history", get_history)])
        try:
            api = RelayApi(str(server.make_url("/api")))
            pushed = await api.post_sync({"tasks": []}, "ios")
            history = await SyncClient(api).history()
            return pushed, history
        finally:
            await server.close()

    pushed, history = asyncio.run(scenario())
    assert pushed["success"] is True
    assert history == []
    assert seen["body"] == {"data": {"tasks": []}, "device": "ios"}


def test_relay_api_errors():
    async def rejected(request):
        return web.json_response({"success": False, "error": "No spreadsheet ID configured"}, status=400)

    async def not_an_object(request):
        return web.json_response([1, 2, 3])

    async def scenario():
        server = await _serve([("GET", "/api/sync", rejected), ("GET", "/api/health", not_an_object)])
        base_url = str(server.make_url("/api"))
        api = RelayApi(base_url)
        try:
            with pytest.raises(NetworkFailureError) as excinfo:
                await api.get_sync()
            assert excinfo.value.status == 400
            assert str(excinfo.value) == "No spreadsheet ID configured"

            with pytest.raises(MalformedSnapshotError):
                await api.health()
        finally:
            await server.close()

        with pytest.raises(NetworkFailureError):
            await RelayApi(base_url, timeout=2).get_sync()

    asyncio.run(scenario())


def test_pull_network_failure_sets_error():
    async def scenario():
        server = await _serve([])
        base_url = str(server.make_url("/api"))
        await server.close()
        client = SyncClient(RelayApi(base_url, timeout=2), replace=lambda s: s)
        result = await client.pull()
        return client, result

    client, result = asyncio.run(scenario())
    assert not result.ok
    assert client.status is SyncStatus.ERROR
    assert "Cannot reach relay" in client.message
