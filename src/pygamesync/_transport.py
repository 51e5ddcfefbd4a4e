"""Object-store transport over the Supabase Storage REST API."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote

import aiohttp

from pygamesync._constants import JSON_CONTENT_TYPE, USER_AGENT
from pygamesync._redact import redact_for_log
from pygamesync.config import GameSyncConfig
from pygamesync.exceptions import GameSyncConflictError, GameSyncStorageError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoredObject:
    """Raw bytes of a stored object plus its entity tag (if the store has one)."""

    data: bytes
    etag: str | None = None


class ObjectStore(Protocol):
    """Structural object-store interface used by the store layer.

    Having a protocol here makes it easy to pass the in-memory store or
    test doubles while keeping the production implementation
    (`SupabaseStorage`) concrete.
    """

    @property
    def supports_conditional_writes(self) -> bool:
        ...

    async def get_object(self, path: str) -> StoredObject | None:
        ...

    async def put_object(
        self,
        path: str,
        data: bytes,
        *,
        content_type: str = JSON_CONTENT_TYPE,
        if_match: str | None = None,
        if_none_match: bool = False,
    ) -> str | None:
        ...

    async def ensure_bucket(self) -> None:
        ...


def _looks_not_found(status: int, text: str) -> bool:
    if status == 404:
        return True
    # Supabase Storage reports missing objects as 400 with a JSON body
    # like {"statusCode": "404", "error": "not_found", ...}.
    if status != 400:
        return False
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        return False
    if not isinstance(body, dict):
        return False
    return str(body.get("statusCode")) == "404" or str(body.get("error", "")).lower() in {"not_found", "not found"}


class SupabaseStorage:
    """Supabase Storage bucket accessed with the service-role key."""

    def __init__(self, config: GameSyncConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._base = config.supabase_url.rstrip("/") + "/storage/v1"

    @property
    def supports_conditional_writes(self) -> bool:
        return self._config.conditional_writes

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        key = self._config.service_role_key
        headers = {
            "authorization": f"Bearer {key}",
            "apikey": key,
            "user-agent": USER_AGENT,
        }
        if extra:
            headers.update(extra)
        return headers

    def _object_url(self, path: str) -> str:
        bucket = quote(self._config.bucket, safe="")
        return f"{self._base}/object/{bucket}/{quote(path.lstrip('/'), safe='/')}"

    async def _request(
        self,
        method: str,
        url: str,
        *,
        path: str,
        headers: dict[str, str] | None = None,
        data: bytes | None = None,
        json_body: Any = None,
    ) -> tuple[int, bytes, Any]:
        request_headers = self._headers(headers)
        if self._config.api_trace_enabled:
            _logger.debug("%s %s headers=%s", method, url, redact_for_log(request_headers))
        else:
            _logger.debug("%s %s", method, url)
        try:
            async with self._http.request(
                method,
                url,
                headers=request_headers,
                data=data,
                json=json_body,
            ) as resp:
                body = await resp.read()
                _logger.debug("%s %s -> HTTP %d (%d bytes)", method, path, resp.status, len(body))
                return resp.status, body, resp.headers
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise GameSyncStorageError(
                f"{method} {path} failed: {exc or type(exc).__name__}",
                path=path,
            ) from exc

    async def get_object(self, path: str) -> StoredObject | None:
        status, body, headers = await self._request("GET", self._object_url(path), path=path)
        text = body.decode("utf-8", errors="replace")
        if _looks_not_found(status, text):
            return None
        if status != 200:
            raise GameSyncStorageError(
                f"download {path} failed: HTTP {status}: {text[:200]}",
                status_code=status,
                path=path,
            )
        return StoredObject(data=body, etag=headers.get("ETag"))

    async def put_object(
        self,
        path: str,
        data: bytes,
        *,
        content_type: str = JSON_CONTENT_TYPE,
        if_match: str | None = None,
        if_none_match: bool = False,
    ) -> str | None:
        extra = {"content-type": content_type, "x-upsert": "true", "cache-control": "no-cache"}
        if self.supports_conditional_writes:
            if if_match is not None:
                extra["if-match"] = if_match
            elif if_none_match:
                extra["if-none-match"] = "*"
        status, body, headers = await self._request(
            "POST",
            self._object_url(path),
            path=path,
            headers=extra,
            data=data,
        )
        if status == 412:
            raise GameSyncConflictError(
                f"upload {path} rejected: precondition failed",
                status_code=status,
                path=path,
            )
        if status not in (200, 201):
            text = body.decode("utf-8", errors="replace")
            raise GameSyncStorageError(
                f"upload {path} failed: HTTP {status}: {text[:200]}",
                status_code=status,
                path=path,
            )
        return headers.get("ETag")

    async def ensure_bucket(self) -> None:
        bucket = self._config.bucket
        status, body, _ = await self._request(
            "GET",
            f"{self._base}/bucket/{quote(bucket, safe='')}",
            path=bucket,
        )
        if status == 200:
            return
        text = body.decode("utf-8", errors="replace")
        if not _looks_not_found(status, text):
            raise GameSyncStorageError(
                f"getBucket({bucket}) failed: HTTP {status}: {text[:200]}",
                status_code=status,
                path=bucket,
            )

        _logger.debug("Creating bucket %s", bucket)
        status, body, _ = await self._request(
            "POST",
            f"{self._base}/bucket",
            path=bucket,
            json_body={
                "id": bucket,
                "name": bucket,
                "public": self._config.bucket_public,
                "file_size_limit": self._config.bucket_file_size_limit,
            },
        )
        if status not in (200, 201):
            text = body.decode("utf-8", errors="replace")
            raise GameSyncStorageError(
                f"createBucket({bucket}) failed: HTTP {status}: {text[:200]}",
                status_code=status,
                path=bucket,
            )
