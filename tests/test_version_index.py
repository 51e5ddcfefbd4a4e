from __future__ import annotations

import json

import pytest
from fakes import FaultyObjectStore

from pygamesync.exceptions import GameSyncConflictError, GameSyncCorruptDataError
from pygamesync.models.channel import Channel
from pygamesync.models.index import VersionIndex
from pygamesync.store.index import VersionIndexStore
from pygamesync.store.snapshots import SnapshotStore

_NOW = "2026-01-01T00:00:00.000Z"


class _UnconditionalStore(FaultyObjectStore):
    """Memory store that ignores preconditions, like a plain upsert bucket."""

    @property
    def supports_conditional_writes(self) -> bool:
        return False


def _indexes(objects: FaultyObjectStore, *, retry_attempts: int = 3) -> VersionIndexStore:
    return VersionIndexStore(SnapshotStore(objects), clock=lambda: _NOW, retry_attempts=retry_attempts)


@pytest.mark.asyncio
async def test_load_missing_returns_default() -> None:
    loaded = await _indexes(FaultyObjectStore()).load("acme", default_channel=["PUBLISHED"], title="Acme")

    assert loaded.existed is False
    assert loaded.etag is None
    assert loaded.index.channels == {}
    assert loaded.index.live_channel is Channel.PUBLISHED
    assert loaded.index.title == "Acme"
    assert loaded.index.updated_at == _NOW


@pytest.mark.asyncio
async def test_load_corrupt_falls_back_to_default_but_keeps_etag() -> None:
    objects = FaultyObjectStore()
    objects.put_raw("acme/index.json", b"{oops")
    indexes = _indexes(objects)

    loaded = await indexes.load("acme")

    assert loaded.existed is True
    assert loaded.etag is not None
    assert loaded.index.channels == {}

    with pytest.raises(GameSyncCorruptDataError):
        await indexes.get("acme")


@pytest.mark.asyncio
async def test_unknown_channels_are_dropped_and_live_channel_normalized() -> None:
    objects = FaultyObjectStore()
    objects.put_raw(
        "acme/index.json",
        json.dumps(
            {
                "slug": "acme",
                "title": "Acme",
                "channels": {
                    "draft": {"currentVersionId": "v1", "path": "draft/current.json"},
                    "staging": {"currentVersionId": "v0", "path": "staging/current.json"},
                },
                "liveChannel": "PUBLISHED",
            }
        ).encode(),
    )

    index = await _indexes(objects).get("acme")

    assert index is not None
    assert set(index.channels) == {Channel.DRAFT}
    assert index.pointer(Channel.DRAFT).current_version_id == "v1"
    assert index.pointer(Channel.PUBLISHED) is None
    assert index.live_channel is Channel.PUBLISHED


@pytest.mark.asyncio
async def test_get_missing_returns_none() -> None:
    assert await _indexes(FaultyObjectStore()).get("acme") is None


def test_set_pointer_and_live_channel_stamp_updated_at() -> None:
    indexes = _indexes(FaultyObjectStore())
    index = VersionIndex(slug="acme", title="Acme", updated_at="old")

    indexes.set_channel_pointer(index, Channel.PUBLISHED, "v2", "published/current.json")
    assert index.updated_at == _NOW
    index.updated_at = "old"
    indexes.set_live_channel(index, Channel.PUBLISHED)

    assert index.updated_at == _NOW
    assert index.live_channel is Channel.PUBLISHED
    assert index.to_document()["channels"] == {
        "published": {"currentVersionId": "v2", "path": "published/current.json"}
    }


@pytest.mark.asyncio
async def test_update_retries_after_losing_a_race() -> None:
    objects = FaultyObjectStore()
    indexes = _indexes(objects)
    await indexes.update("acme", lambda idx: indexes.set_channel_pointer(idx, Channel.DRAFT, "v1", "draft/current.json"))

    raced = []

    def _concurrent_writer(path: str) -> None:
        if path == "acme/index.json" and not raced:
            raced.append(path)
            document = json.loads(objects.raw(path))
            document["channels"]["published"] = {"currentVersionId": "p1", "path": "published/current.json"}
            objects.put_raw(path, json.dumps(document).encode())

    objects.before_put = _concurrent_writer
    index = await indexes.update("acme", lambda idx: indexes.set_live_channel(idx, Channel.PUBLISHED))

    assert raced
    assert index.pointer(Channel.DRAFT).current_version_id == "v1"
    assert index.pointer(Channel.PUBLISHED).current_version_id == "p1"
    stored = await indexes.get("acme")
    assert stored is not None
    assert stored.live_channel is Channel.PUBLISHED
    assert stored.pointer(Channel.PUBLISHED).current_version_id == "p1"


@pytest.mark.asyncio
async def test_update_raises_conflict_when_retries_exhausted() -> None:
    objects = FaultyObjectStore()
    indexes = _indexes(objects, retry_attempts=2)
    await indexes.update("acme", lambda idx: None)

    def _always_race(path: str) -> None:
        if path == "acme/index.json":
            objects.put_raw(path, objects.raw(path))

    objects.before_put = _always_race

    with pytest.raises(GameSyncConflictError):
        await indexes.update("acme", lambda idx: indexes.set_live_channel(idx, Channel.PUBLISHED))


@pytest.mark.asyncio
async def test_first_writer_wins_when_index_is_created_concurrently() -> None:
    objects = FaultyObjectStore()
    indexes = _indexes(objects, retry_attempts=1)

    def _create_first(path: str) -> None:
        if path == "acme/index.json" and objects.raw(path) is None:
            objects.put_raw(path, b'{"slug": "acme", "title": "Other"}')

    objects.before_put = _create_first

    with pytest.raises(GameSyncConflictError):
        await indexes.update("acme", lambda idx: None)


@pytest.mark.asyncio
async def test_unconditional_store_saves_without_preconditions() -> None:
    objects = _UnconditionalStore()
    indexes = _indexes(objects)
    objects.put_raw("acme/index.json", b'{"slug": "acme", "title": "Acme"}')

    def _race(path: str) -> None:
        objects.put_raw(path, objects.raw(path))

    objects.before_put = _race
    index = await indexes.update("acme", lambda idx: indexes.set_live_channel(idx, Channel.PUBLISHED))

    assert index.live_channel is Channel.PUBLISHED
    assert objects.writes == ["acme/index.json"]
