"""In-process object store.

Implements the :class:`pygamesync._transport.ObjectStore` protocol with
real conditional-write semantics, so the hardened version-index path can
run without a remote store. Useful for tests and local tooling.
"""

from __future__ import annotations

import asyncio

from pygamesync._constants import JSON_CONTENT_TYPE
from pygamesync._transport import StoredObject
from pygamesync.exceptions import GameSyncConflictError


class MemoryObjectStore:
    """Dict-backed store with generation-counter etags."""

    def __init__(self) -> None:
        self._objects: dict[str, StoredObject] = {}
        self._generation = 0
        self._lock = asyncio.Lock()
        self.bucket_ready = False

    @property
    def supports_conditional_writes(self) -> bool:
        return True

    def keys(self) -> list[str]:
        return sorted(self._objects)

    def raw(self, path: str) -> bytes | None:
        stored = self._objects.get(path)
        return stored.data if stored is not None else None

    def _store(self, path: str, data: bytes) -> str:
        self._generation += 1
        etag = f'"{self._generation}"'
        self._objects[path] = StoredObject(data=bytes(data), etag=etag)
        return etag

    async def get_object(self, path: str) -> StoredObject | None:
        return self._objects.get(path)

    async def put_object(
        self,
        path: str,
        data: bytes,
        *,
        content_type: str = JSON_CONTENT_TYPE,
        if_match: str | None = None,
        if_none_match: bool = False,
    ) -> str | None:
        async with self._lock:
            current = self._objects.get(path)
            if if_match is not None and (current is None or current.etag != if_match):
                raise GameSyncConflictError(f"upload {path} rejected: etag mismatch", status_code=412, path=path)
            if if_none_match and current is not None:
                raise GameSyncConflictError(f"upload {path} rejected: object exists", status_code=412, path=path)
            return self._store(path, data)

    async def ensure_bucket(self) -> None:
        self.bucket_ready = True
