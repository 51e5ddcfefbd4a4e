"""JSON document store over an :class:`ObjectStore`.

Reads are never cached. A missing key and a stored-but-unparseable
document are reported as distinct :class:`ReadStatus` values rather than
exceptions, so callers decide whether absence is acceptable.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pygamesync._constants import JSON_CONTENT_TYPE
from pygamesync._transport import ObjectStore
from pygamesync.exceptions import GameSyncCorruptDataError, GameSyncNotFoundError, GameSyncValidationError

_logger = logging.getLogger(__name__)


class ReadStatus(StrEnum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    CORRUPT = "corrupt"


@dataclass(frozen=True, slots=True)
class ReadResult:
    """Outcome of :meth:`SnapshotStore.get`.

    ``etag`` is populated for both ``FOUND`` and ``CORRUPT`` results so a
    caller replacing a corrupt document can still write conditionally.
    """

    key: str
    status: ReadStatus
    document: dict[str, Any] | None = None
    etag: str | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.status is ReadStatus.FOUND

    @property
    def exists(self) -> bool:
        return self.status is not ReadStatus.NOT_FOUND

    def require(self) -> dict[str, Any]:
        """Return the document or raise the matching typed error."""
        if self.status is ReadStatus.NOT_FOUND:
            raise GameSyncNotFoundError(f"{self.key} not found", path=self.key)
        if self.status is ReadStatus.CORRUPT or self.document is None:
            raise GameSyncCorruptDataError(f"{self.key} is corrupt: {self.error}", path=self.key)
        return self.document


def encode_document(document: dict[str, Any]) -> bytes:
    return json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False).encode("utf-8")


class SnapshotStore:
    """Key/value read-write of JSON objects."""

    def __init__(self, objects: ObjectStore) -> None:
        self._objects = objects

    @property
    def objects(self) -> ObjectStore:
        return self._objects

    async def put(
        self,
        key: str,
        document: dict[str, Any],
        *,
        if_match: str | None = None,
        if_none_match: bool = False,
    ) -> str | None:
        """Serialize and write *document*; returns the new etag when known."""
        try:
            data = encode_document(document)
        except (TypeError, ValueError) as exc:
            raise GameSyncValidationError(f"{key}: document is not plain JSON: {exc}", field="document") from exc
        _logger.debug("put %s (%d bytes)", key, len(data))
        return await self._objects.put_object(
            key,
            data,
            content_type=JSON_CONTENT_TYPE,
            if_match=if_match,
            if_none_match=if_none_match,
        )

    async def get(self, key: str) -> ReadResult:
        stored = await self._objects.get_object(key)
        if stored is None:
            return ReadResult(key=key, status=ReadStatus.NOT_FOUND)

        try:
            text = stored.data.decode("utf-8")
            document = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            _logger.warning("Failed to parse JSON at %s: %s", key, exc)
            return ReadResult(key=key, status=ReadStatus.CORRUPT, etag=stored.etag, error=str(exc))

        if not isinstance(document, dict):
            error = f"expected a JSON object, got {type(document).__name__}"
            _logger.warning("Unexpected document shape at %s: %s", key, error)
            return ReadResult(key=key, status=ReadStatus.CORRUPT, etag=stored.etag, error=error)

        return ReadResult(key=key, status=ReadStatus.FOUND, document=document, etag=stored.etag)
