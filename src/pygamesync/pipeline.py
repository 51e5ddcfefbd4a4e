"""Save / publish / make-live / recenter orchestration.

Write order of every commit, each step awaited before the next:

1. the immutable snapshot under ``<slug>/versions/<versionId>.json``
2. the channel pointer document ``<slug>/<channel>/current.json``
3. the version index (load, point the channel at the version, save)
4. the live mirror ``<slug>/live/current.json``, only for a published
   save with ``GAME_ENABLED`` set

Nothing is rolled back. A failure at step *k* leaves steps ``1..k-1``
written; replaying the request with the same version id rewrites the
same keys and converges.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from pygamesync.exceptions import GameSyncCorruptDataError
from pygamesync.geo.engine import GeoRecenterEngine, find_map_center
from pygamesync.models._base import utc_now_iso
from pygamesync.models.channel import Channel, normalize_channel
from pygamesync.models.geo import LatLng, RecenterMode
from pygamesync.models.index import VersionIndex
from pygamesync.models.requests import RecenterRequest, SaveRequest, parse_request
from pygamesync.models.results import MakeLiveResult, RecenterResult, SavePaths, SaveResult
from pygamesync.models.snapshot import ChannelCurrent, GameFlags, LiveMirror, Snapshot
from pygamesync.normalize import normalize_slug, normalize_version_id
from pygamesync.rewrite import ContentRewriter
from pygamesync.store.index import VersionIndexStore
from pygamesync.store.keys import (
    channel_current_path,
    channel_pointer_path,
    index_path,
    live_mirror_path,
    version_path,
)
from pygamesync.store.snapshots import ReadStatus, SnapshotStore

_logger = logging.getLogger(__name__)


def new_version_id() -> str:
    return str(uuid.uuid4())


class PublishPipeline:
    """Draft → published → live lifecycle of one title's configuration."""

    def __init__(
        self,
        snapshots: SnapshotStore,
        indexes: VersionIndexStore,
        *,
        rewriter: ContentRewriter | None = None,
        engine: GeoRecenterEngine | None = None,
        default_channel: Channel = Channel.DRAFT,
        clock: Callable[[], str] = utc_now_iso,
        id_factory: Callable[[], str] = new_version_id,
    ) -> None:
        self._snapshots = snapshots
        self._indexes = indexes
        self._rewriter = rewriter or ContentRewriter()
        self._engine = engine or GeoRecenterEngine()
        self._default_channel = normalize_channel(default_channel)
        self._clock = clock
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def save(
        self,
        slug: Any,
        channel: Any,
        body: Any = None,
        *,
        version_id: str | None = None,
        op: str = "save",
    ) -> SaveResult:
        """Persist *body* as a new snapshot on *channel*.

        *version_id* (or ``body["versionId"]``) makes a retry idempotent;
        otherwise a fresh id is generated.
        """
        slug = normalize_slug(slug)
        request = parse_request(SaveRequest, body if body is not None else {})
        default_channel = request.default_channel or self._default_channel
        target = normalize_channel(channel, fallback=default_channel)

        requested_id = version_id if version_id is not None else request.version_id
        resolved_id = normalize_version_id(requested_id) if requested_id is not None else self._id_factory()

        snapshot = Snapshot(
            slug=slug,
            title=request.title or slug,
            channel=target,
            flags=request.flags,
            default_channel=default_channel,
            settings=request.settings,
            missions=request.missions,
            devices=request.devices,
            media=request.media,
            updated_at=self._clock(),
        )
        return await self._commit(op, snapshot, resolved_id)

    async def publish(self, slug: Any, body: Any = None, *, version_id: str | None = None) -> SaveResult:
        return await self.save(slug, Channel.PUBLISHED, body, version_id=version_id, op="publish")

    async def make_live(
        self,
        slug: Any,
        *,
        title: str | None = None,
        default_channel: Any = None,
        flags: Any = None,
    ) -> MakeLiveResult:
        """Point the index's live channel at ``published``; writes no snapshot."""
        slug = normalize_slug(slug)
        parsed_flags = parse_request(GameFlags, flags) if flags is not None else None
        index = await self._indexes.update(
            slug,
            lambda idx: self._indexes.set_live_channel(idx, Channel.PUBLISHED),
            default_channel=normalize_channel(default_channel, fallback=self._default_channel),
            title=title,
            flags=parsed_flags,
        )
        _logger.debug("make-live %s -> %s", slug, index.live_channel)
        return MakeLiveResult(slug=slug, live_channel=index.live_channel)

    async def recenter(
        self,
        slug: Any,
        channel: Any,
        new_center: LatLng | dict[str, Any],
        *,
        mode: RecenterMode | str,
    ) -> RecenterResult:
        """Move the pins of the channel's current snapshot and commit the result.

        *mode* is required: ``relative`` preserves layout, ``absolute``
        snaps every pin onto *new_center*.
        """
        slug = normalize_slug(slug)
        target = normalize_channel(channel)
        request = parse_request(RecenterRequest, {"new_center": new_center, "mode": mode})

        document = await self._current_document(slug, target)

        if request.mode is RecenterMode.RELATIVE:
            try:
                old_center = find_map_center(document)
            except GameSyncCorruptDataError as exc:
                key = channel_current_path(slug, target)
                raise GameSyncCorruptDataError(f"{key}: {exc}", path=key) from exc
            outcome = self._engine.recenter(document, old_center, request.new_center)
        else:
            outcome = self._engine.recenter_all_pins_to(document, request.new_center)

        outcome.document["updatedAt"] = self._clock()
        snapshot = Snapshot.model_validate(outcome.document)
        saved = await self._commit("recenter", snapshot, self._id_factory())

        if request.mode is RecenterMode.RELATIVE and not outcome.moved:
            message = "No previous center; set new center only."
        else:
            message = f"Updated {outcome.coordinates_updated} coordinates."

        return RecenterResult(
            slug=slug,
            channel=target,
            mode=request.mode,
            moved=outcome.moved,
            version_id=saved.version_id,
            coordinates_updated=outcome.coordinates_updated,
            delta=outcome.delta,
            message=message,
            paths=saved.paths,
        )

    async def _current_document(self, slug: str, channel: Channel) -> dict[str, Any]:
        current = await self.load(slug, channel)
        if current is None:
            _logger.debug("No %s snapshot for %s, recentering an empty configuration", channel, slug)
            empty = Snapshot(
                slug=slug,
                title=slug,
                channel=channel,
                default_channel=self._default_channel,
                updated_at=self._clock(),
            )
            return empty.to_document()
        return current.snapshot.to_document()

    async def _commit(self, op: str, snapshot: Snapshot, version_id: str) -> SaveResult:
        slug = snapshot.slug
        channel = snapshot.channel

        if channel is Channel.PUBLISHED:
            snapshot = Snapshot.model_validate(self._rewriter.rewrite_for_promotion(snapshot.to_document()))

        version_key = version_path(slug, version_id)
        _logger.debug("%s %s/%s: writing version %s", op, slug, channel, version_key)
        await self._snapshots.put(version_key, snapshot.to_document())

        current_key = channel_current_path(slug, channel)
        _logger.debug("%s %s/%s: writing channel pointer %s", op, slug, channel, current_key)
        current = ChannelCurrent(version_id=version_id, path=version_key, snapshot=snapshot)
        await self._snapshots.put(current_key, current.to_document())

        def _point(index: VersionIndex) -> None:
            index.title = snapshot.title
            index.flags = snapshot.flags
            self._indexes.set_channel_pointer(index, channel, version_id, channel_pointer_path(channel))

        _logger.debug("%s %s/%s: updating index", op, slug, channel)
        await self._indexes.update(
            slug,
            _point,
            default_channel=snapshot.default_channel,
            title=snapshot.title,
            flags=snapshot.flags,
        )

        live_key: str | None = None
        if snapshot.flags.game_enabled and channel is Channel.PUBLISHED:
            live_key = live_mirror_path(slug)
            _logger.debug("%s %s: writing live mirror %s", op, slug, live_key)
            mirror = LiveMirror(version_id=version_id, path=version_key, snapshot=snapshot)
            await self._snapshots.put(live_key, mirror.to_document())

        return SaveResult(
            op=op,
            slug=slug,
            channel=channel,
            version_id=version_id,
            paths=SavePaths(
                index=index_path(slug),
                version=version_key,
                current=current_key,
                live=live_key,
            ),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def load(self, slug: Any, channel: Any) -> ChannelCurrent | None:
        """The channel's current document, or ``None`` if never saved."""
        slug = normalize_slug(slug)
        key = channel_current_path(slug, normalize_channel(channel))
        return await self._read_model(key, ChannelCurrent)

    async def load_live(self, slug: Any) -> LiveMirror | None:
        slug = normalize_slug(slug)
        return await self._read_model(live_mirror_path(slug), LiveMirror)

    async def get_index(self, slug: Any) -> VersionIndex | None:
        return await self._indexes.get(normalize_slug(slug))

    async def load_version(self, slug: Any, version_id: str) -> Snapshot:
        """A specific snapshot; raises :class:`GameSyncNotFoundError` if absent."""
        key = version_path(normalize_slug(slug), normalize_version_id(version_id))
        document = (await self._snapshots.get(key)).require()
        try:
            return Snapshot.model_validate(document)
        except ValidationError as exc:
            raise GameSyncCorruptDataError(f"{key} failed validation: {exc}", path=key) from exc

    async def _read_model(self, key: str, model: type[ChannelCurrent]) -> Any:
        result = await self._snapshots.get(key)
        if result.status is ReadStatus.NOT_FOUND:
            return None
        document = result.require()
        try:
            return model.model_validate(document)
        except ValidationError as exc:
            raise GameSyncCorruptDataError(f"{key} failed validation: {exc}", path=key) from exc
