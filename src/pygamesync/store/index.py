"""Per-title version index: load, mutate, save.

The index is read-modify-written on every pipeline operation. When the
underlying store honors preconditions, :meth:`VersionIndexStore.update`
saves with ``If-Match``/``If-None-Match`` and replays the whole
load-mutate-save cycle after losing a race, so a concurrent writer's
pointer is never silently dropped. Without preconditions the last writer
wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import ValidationError

from pygamesync.exceptions import GameSyncConflictError, GameSyncCorruptDataError
from pygamesync.models._base import utc_now_iso
from pygamesync.models.channel import Channel, normalize_channel
from pygamesync.models.index import ChannelPointer, VersionIndex
from pygamesync.models.snapshot import GameFlags
from pygamesync.store.keys import index_path
from pygamesync.store.snapshots import ReadStatus, SnapshotStore

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LoadedIndex:
    index: VersionIndex
    etag: str | None = None
    existed: bool = False


class VersionIndexStore:
    def __init__(
        self,
        snapshots: SnapshotStore,
        *,
        clock: Callable[[], str] = utc_now_iso,
        retry_attempts: int = 3,
    ) -> None:
        self._snapshots = snapshots
        self._clock = clock
        self._retry_attempts = max(1, retry_attempts)

    @property
    def conditional(self) -> bool:
        return self._snapshots.objects.supports_conditional_writes

    def default(
        self,
        slug: str,
        *,
        default_channel: object = Channel.DRAFT,
        title: str | None = None,
        flags: GameFlags | None = None,
    ) -> VersionIndex:
        """A freshly initialized index with no channel pointers."""
        return VersionIndex(
            slug=slug,
            title=title or slug,
            channels={},
            live_channel=normalize_channel(default_channel),
            flags=flags if flags is not None else GameFlags(),
            updated_at=self._clock(),
        )

    async def load(
        self,
        slug: str,
        *,
        default_channel: object = Channel.DRAFT,
        title: str | None = None,
        flags: GameFlags | None = None,
    ) -> LoadedIndex:
        """Load the stored index, or a default one when absent or unreadable."""
        key = index_path(slug)
        result = await self._snapshots.get(key)
        if result.status is ReadStatus.FOUND and result.document is not None:
            try:
                return LoadedIndex(
                    index=VersionIndex.model_validate(result.document),
                    etag=result.etag,
                    existed=True,
                )
            except ValidationError as exc:
                _logger.warning("Index %s failed validation, using defaults: %s", key, exc)
        elif result.status is ReadStatus.CORRUPT:
            _logger.warning("Index %s is corrupt, using defaults: %s", key, result.error)

        return LoadedIndex(
            index=self.default(slug, default_channel=default_channel, title=title, flags=flags),
            etag=result.etag,
            existed=result.exists,
        )

    async def get(self, slug: str) -> VersionIndex | None:
        """Strict read: ``None`` when absent, raises when unreadable."""
        key = index_path(slug)
        result = await self._snapshots.get(key)
        if result.status is ReadStatus.NOT_FOUND:
            return None
        document = result.require()
        try:
            return VersionIndex.model_validate(document)
        except ValidationError as exc:
            raise GameSyncCorruptDataError(f"{key} failed validation: {exc}", path=key) from exc

    async def save(
        self,
        slug: str,
        index: VersionIndex,
        *,
        etag: str | None = None,
        existed: bool = False,
    ) -> str | None:
        key = index_path(slug)
        if not self.conditional:
            return await self._snapshots.put(key, index.to_document())
        if existed:
            return await self._snapshots.put(key, index.to_document(), if_match=etag)
        return await self._snapshots.put(key, index.to_document(), if_none_match=True)

    def set_channel_pointer(self, index: VersionIndex, channel: Channel, version_id: str, path: str) -> None:
        index.channels[channel] = ChannelPointer(current_version_id=version_id, path=path)
        index.updated_at = self._clock()

    def set_live_channel(self, index: VersionIndex, channel: Channel) -> None:
        index.live_channel = normalize_channel(channel)
        index.updated_at = self._clock()

    async def update(
        self,
        slug: str,
        mutate: Callable[[VersionIndex], None],
        *,
        default_channel: object = Channel.DRAFT,
        title: str | None = None,
        flags: GameFlags | None = None,
    ) -> VersionIndex:
        """Load, apply *mutate* in place, and save the index.

        Raises
        ------
        GameSyncConflictError
            When every conditional save attempt lost its race.
        """
        for attempt in range(1, self._retry_attempts + 1):
            loaded = await self.load(slug, default_channel=default_channel, title=title, flags=flags)
            mutate(loaded.index)
            try:
                await self.save(slug, loaded.index, etag=loaded.etag, existed=loaded.existed)
            except GameSyncConflictError:
                if attempt >= self._retry_attempts:
                    raise
                _logger.warning(
                    "Index %s changed concurrently, retrying (%d/%d)",
                    slug,
                    attempt,
                    self._retry_attempts,
                )
                continue
            return loaded.index
        raise GameSyncConflictError(f"index update for {slug} did not complete", path=index_path(slug))
