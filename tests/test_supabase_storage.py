from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pygamesync._transport import SupabaseStorage
from pygamesync.config import GameSyncConfig
from pygamesync.exceptions import GameSyncConflictError, GameSyncStorageError

_KEY = "service-role-secret"


@dataclass
class _FakeSupabase:
    """Just enough of the Storage REST API to exercise the transport."""

    buckets: dict[str, dict] = field(default_factory=dict)
    objects: dict[str, tuple[bytes, str]] = field(default_factory=dict)
    requests: list[tuple[str, str, dict[str, str]]] = field(default_factory=list)
    generation: int = 0
    fail_status: int | None = None

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/storage/v1/bucket/{bucket}", self.get_bucket)
        app.router.add_post("/storage/v1/bucket", self.create_bucket)
        app.router.add_get("/storage/v1/object/{bucket}/{path:.*}", self.download)
        app.router.add_post("/storage/v1/object/{bucket}/{path:.*}", self.upload)
        return app

    def _record(self, request: web.Request) -> web.Response | None:
        self.requests.append((request.method, request.path, {k.lower(): v for k, v in request.headers.items()}))
        if request.headers.get("Authorization") != f"Bearer {_KEY}" or request.headers.get("apikey") != _KEY:
            return web.json_response({"statusCode": "403", "error": "Unauthorized"}, status=403)
        if self.fail_status is not None:
            return web.json_response({"error": "boom"}, status=self.fail_status)
        return None

    async def get_bucket(self, request: web.Request) -> web.Response:
        if (denied := self._record(request)) is not None:
            return denied
        bucket = request.match_info["bucket"]
        if bucket not in self.buckets:
            return web.json_response({"statusCode": "404", "error": "Bucket not found"}, status=400)
        return web.json_response(self.buckets[bucket])

    async def create_bucket(self, request: web.Request) -> web.Response:
        if (denied := self._record(request)) is not None:
            return denied
        body = await request.json()
        self.buckets[body["id"]] = body
        return web.json_response({"name": body["id"]})

    async def download(self, request: web.Request) -> web.Response:
        if (denied := self._record(request)) is not None:
            return denied
        key = f"{request.match_info['bucket']}/{request.match_info['path']}"
        if key not in self.objects:
            return web.json_response({"statusCode": "404", "error": "not_found", "message": "Object not found"}, status=400)
        data, etag = self.objects[key]
        return web.Response(body=data, headers={"ETag": etag})

    async def upload(self, request: web.Request) -> web.Response:
        if (denied := self._record(request)) is not None:
            return denied
        key = f"{request.match_info['bucket']}/{request.match_info['path']}"
        current = self.objects.get(key)
        if_match = request.headers.get("If-Match")
        if if_match is not None and (current is None or current[1] != if_match):
            return web.json_response({"error": "precondition failed"}, status=412)
        if request.headers.get("If-None-Match") == "*" and current is not None:
            return web.json_response({"error": "precondition failed"}, status=412)
        if current is not None and request.headers.get("x-upsert") != "true":
            return web.json_response({"error": "Duplicate"}, status=409)
        self.generation += 1
        etag = f'"{self.generation}"'
        self.objects[key] = (await request.read(), etag)
        return web.json_response({"Key": key}, headers={"ETag": etag})


@asynccontextmanager
async def _storage(fake: _FakeSupabase, **overrides: object) -> AsyncIterator[SupabaseStorage]:
    async with TestServer(fake.app()) as server, aiohttp.ClientSession() as session:
        config = GameSyncConfig(
            supabase_url=str(server.make_url("/")),
            service_role_key=_KEY,
            bucket="game-config",
            **overrides,
        )
        yield SupabaseStorage(config, session)


@pytest.mark.asyncio
async def test_upload_then_download() -> None:
    fake = _FakeSupabase()
    async with _storage(fake) as storage:
        etag = await storage.put_object("acme/index.json", b'{"a": 1}')
        stored = await storage.get_object("acme/index.json")

    assert stored is not None
    assert stored.data == b'{"a": 1}'
    assert stored.etag == etag == '"1"'
    method, path, headers = fake.requests[0]
    assert (method, path) == ("POST", "/storage/v1/object/game-config/acme/index.json")
    assert headers["x-upsert"] == "true"
    assert headers["content-type"].startswith("application/json")
    assert "if-match" not in headers


@pytest.mark.asyncio
async def test_missing_object_reported_as_400_is_absent() -> None:
    async with _storage(_FakeSupabase()) as storage:
        assert await storage.get_object("acme/missing.json") is None


@pytest.mark.asyncio
async def test_server_errors_raise_storage_error() -> None:
    fake = _FakeSupabase(fail_status=500)
    async with _storage(fake) as storage:
        with pytest.raises(GameSyncStorageError) as excinfo:
            await storage.get_object("acme/index.json")
        assert excinfo.value.status_code == 500
        assert excinfo.value.path == "acme/index.json"

        with pytest.raises(GameSyncStorageError, match="upload acme/index.json failed: HTTP 500"):
            await storage.put_object("acme/index.json", b"{}")


@pytest.mark.asyncio
async def test_bad_credentials_raise_storage_error() -> None:
    fake = _FakeSupabase()
    async with TestServer(fake.app()) as server, aiohttp.ClientSession() as session:
        config = GameSyncConfig(supabase_url=str(server.make_url("/")), service_role_key="wrong")
        with pytest.raises(GameSyncStorageError) as excinfo:
            await SupabaseStorage(config, session).put_object("acme/index.json", b"{}")

    assert excinfo.value.status_code == 403


@pytest.mark.asyncio
async def test_conditional_writes_send_preconditions() -> None:
    fake = _FakeSupabase()
    async with _storage(fake, conditional_writes=True) as storage:
        assert storage.supports_conditional_writes is True
        first = await storage.put_object("acme/index.json", b"{}", if_none_match=True)
        with pytest.raises(GameSyncConflictError):
            await storage.put_object("acme/index.json", b"{}", if_none_match=True)
        second = await storage.put_object("acme/index.json", b'{"v": 2}', if_match=first)
        with pytest.raises(GameSyncConflictError) as excinfo:
            await storage.put_object("acme/index.json", b'{"v": 3}', if_match=first)

    assert second != first
    assert excinfo.value.status_code == 412
    assert fake.requests[0][2]["if-none-match"] == "*"
    assert fake.requests[2][2]["if-match"] == first


@pytest.mark.asyncio
async def test_preconditions_not_sent_unless_enabled() -> None:
    fake = _FakeSupabase()
    async with _storage(fake) as storage:
        await storage.put_object("acme/index.json", b"{}", if_match='"9"')

    headers = fake.requests[0][2]
    assert "if-match" not in headers
    assert "if-none-match" not in headers


@pytest.mark.asyncio
async def test_ensure_bucket_creates_missing_bucket_once() -> None:
    fake = _FakeSupabase()
    async with _storage(fake, bucket_public=False, bucket_file_size_limit="10mb") as storage:
        await storage.ensure_bucket()
        await storage.ensure_bucket()

    assert fake.buckets == {
        "game-config": {"id": "game-config", "name": "game-config", "public": False, "file_size_limit": "10mb"}
    }
    assert [(m, p) for m, p, _ in fake.requests] == [
        ("GET", "/storage/v1/bucket/game-config"),
        ("POST", "/storage/v1/bucket"),
        ("GET", "/storage/v1/bucket/game-config"),
    ]


@pytest.mark.asyncio
async def test_connection_errors_are_wrapped() -> None:
    async with aiohttp.ClientSession() as session:
        config = GameSyncConfig(supabase_url="http://127.0.0.1:1", service_role_key=_KEY)
        with pytest.raises(GameSyncStorageError, match="GET acme/index.json failed"):
            await SupabaseStorage(config, session).get_object("acme/index.json")


@pytest.mark.asyncio
async def test_api_trace_logs_redacted_headers(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="pygamesync._transport")
    async with _storage(_FakeSupabase(), api_trace_enabled=True) as storage:
        await storage.get_object("acme/index.json")

    assert "<redacted>" in caplog.text
    assert _KEY not in caplog.text


def test_body_shape_not_found_detection() -> None:
    from pygamesync._transport import _looks_not_found

    assert _looks_not_found(404, "")
    assert _looks_not_found(400, json.dumps({"statusCode": "404"}))
    assert _looks_not_found(400, json.dumps({"error": "not_found"}))
    assert not _looks_not_found(400, json.dumps({"error": "InvalidKey"}))
    assert not _looks_not_found(400, "garbage")
    assert not _looks_not_found(500, json.dumps({"statusCode": "404"}))
