"""History store and API tests.

Learn: These hit a real Postgres through the savepoint-rollback db_session
fixture, so every insert disappears after the test. Without a reachable
database the whole module is skipped by the fixture.
"""

import base64
from datetime import datetime, timezone

import pytest
from conftest import RED_PIXEL

from logo_png.history.store import HistoryEntryNotFoundError, HistoryStore
from logo_png.logo.render import render

RED_PNG = render(RED_PIXEL)


# ═══════════════════════════════════════════════════════════
# HistoryStore
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_insert_assigns_increasing_timestamps(db_session):
    store = HistoryStore(db_session)

    first = await store.insert(b"first")
    second = await store.insert(b"second")

    assert first.tzinfo is not None
    assert second > first


@pytest.mark.asyncio
async def test_list_all_is_oldest_first(db_session):
    store = HistoryStore(db_session)
    for payload in (b"a", b"b", b"c"):
        await store.insert(payload)

    entries = await store.list_all()

    assert [e.image_png for e in entries][-3:] == [b"a", b"b", b"c"]


@pytest.mark.asyncio
async def test_list_all_limit(db_session):
    store = HistoryStore(db_session)
    for payload in (b"a", b"b", b"c"):
        await store.insert(payload)

    assert len(await store.list_all(limit=2)) == 2


@pytest.mark.asyncio
async def test_get_by_timestamp(db_session):
    store = HistoryStore(db_session)
    created_at = await store.insert(RED_PNG)

    assert await store.get_by_timestamp(created_at) == RED_PNG


@pytest.mark.asyncio
async def test_get_by_unknown_timestamp_raises(db_session):
    store = HistoryStore(db_session)

    with pytest.raises(HistoryEntryNotFoundError):
        await store.get_by_timestamp(datetime(2001, 1, 1, tzinfo=timezone.utc))


@pytest.mark.asyncio
async def test_list_timestamps_matches_inserts(db_session):
    store = HistoryStore(db_session)
    stamps = [await store.insert(p) for p in (b"x", b"y")]

    assert (await store.list_timestamps())[-2:] == stamps


# ═══════════════════════════════════════════════════════════
# /api/v1/history
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_history_returns_base64_png(history_client, db_session):
    await HistoryStore(db_session).insert(RED_PNG)

    r = await history_client.get("/api/v1/history")

    assert r.status_code == 200
    latest = r.json()[-1]
    assert set(latest) == {"time", "logo"}
    assert base64.b64decode(latest["logo"]) == RED_PNG


@pytest.mark.asyncio
async def test_history_limit_and_validation(history_client, db_session):
    store = HistoryStore(db_session)
    for payload in (b"a", b"b", b"c"):
        await store.insert(payload)

    r = await history_client.get("/api/v1/history", params={"limit": 1})
    assert r.status_code == 200
    assert len(r.json()) == 1

    r = await history_client.get("/api/v1/history", params={"limit": 0})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_history_index_lists_timestamps(history_client, db_session):
    created_at = await HistoryStore(db_session).insert(RED_PNG)

    r = await history_client.get("/api/v1/history/index")

    assert r.status_code == 200
    times = [datetime.fromisoformat(e["time"].replace("Z", "+00:00")) for e in r.json()]
    assert created_at in times


@pytest.mark.asyncio
async def test_history_entry_png_by_listed_timestamp(history_client, db_session):
    await HistoryStore(db_session).insert(RED_PNG)
    listed = (await history_client.get("/api/v1/history/index")).json()[-1]["time"]

    r = await history_client.get(f"/api/v1/history/{listed}")

    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.content == RED_PNG


@pytest.mark.asyncio
async def test_history_entry_unknown_timestamp_is_404(history_client):
    r = await history_client.get("/api/v1/history/2001-01-01T00:00:00Z")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_history_entry_bad_timestamp_is_422(history_client):
    r = await history_client.get("/api/v1/history/not-a-time")
    assert r.status_code == 422
