"""High-level async client for game-configuration publishing."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from typing import Any

import aiohttp

from pygamesync._constants import HEALTH_PROBE_PATH
from pygamesync._transport import ObjectStore, SupabaseStorage
from pygamesync.config import GameSyncConfig
from pygamesync.exceptions import GameSyncConfigError, GameSyncError, GameSyncStorageError
from pygamesync.models._base import utc_now_iso
from pygamesync.models.geo import LatLng, RecenterMode
from pygamesync.models.index import VersionIndex
from pygamesync.models.results import MakeLiveResult, RecenterResult, SaveResult, SelftestReport
from pygamesync.models.snapshot import ChannelCurrent, LiveMirror, Snapshot
from pygamesync.pipeline import PublishPipeline, new_version_id
from pygamesync.rewrite import ContentRewriter
from pygamesync.store.index import VersionIndexStore
from pygamesync.store.snapshots import SnapshotStore

_logger = logging.getLogger(__name__)


class GameSyncClient:
    """Async client for draft/published/live game configurations.

    Usage::

        async with GameSyncClient(GameSyncConfig.from_env()) as client:
            await client.save("demo", "draft", {"title": "Demo"})
            await client.publish("demo", {"title": "Demo"})
            await client.make_live("demo")
    """

    def __init__(
        self,
        config: GameSyncConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        store: ObjectStore | None = None,
        clock: Callable[[], str] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._injected_store = store
        self._store: ObjectStore | None = None
        self._pipeline: PublishPipeline | None = None
        self._clock = clock or utc_now_iso
        self._id_factory = id_factory or new_version_id
        self._bucket_ready = False

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> GameSyncClient:
        if self._injected_store is not None:
            store = self._injected_store
        else:
            if not self._config.supabase_url or not self._config.service_role_key:
                raise GameSyncConfigError(
                    "Missing Supabase configuration (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)"
                )
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self._config.request_timeout),
                )
            store = SupabaseStorage(self._config, self._http_session)

        snapshots = SnapshotStore(store)
        indexes = VersionIndexStore(
            snapshots,
            clock=self._clock,
            retry_attempts=self._config.index_retry_attempts,
        )
        self._store = store
        self._pipeline = PublishPipeline(
            snapshots,
            indexes,
            rewriter=ContentRewriter(media_prefix=self._config.media_pool_prefix),
            default_channel=self._config.default_channel,
            clock=self._clock,
            id_factory=self._id_factory,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._pipeline = None
        self._store = None
        self._bucket_ready = False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_pipeline(self) -> PublishPipeline:
        if self._pipeline is None:
            raise GameSyncError("Client not initialized. Use 'async with GameSyncClient(...) as client:'")
        return self._pipeline

    def _require_store(self) -> ObjectStore:
        if self._store is None:
            raise GameSyncError("Client not initialized. Use 'async with GameSyncClient(...) as client:'")
        return self._store

    async def _ensure_bucket(self) -> None:
        if self._bucket_ready or not self._config.ensure_bucket:
            return
        await self._require_store().ensure_bucket()
        self._bucket_ready = True

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def save(
        self,
        slug: str,
        channel: Any,
        body: dict[str, Any] | None = None,
        *,
        version_id: str | None = None,
    ) -> SaveResult:
        """Save a configuration snapshot to *channel* (``draft``/``published``)."""
        pipeline = self._require_pipeline()
        await self._ensure_bucket()
        return await pipeline.save(slug, channel, body, version_id=version_id)

    async def publish(
        self,
        slug: str,
        body: dict[str, Any] | None = None,
        *,
        version_id: str | None = None,
    ) -> SaveResult:
        """Same as :meth:`save` with the channel forced to ``published``."""
        pipeline = self._require_pipeline()
        await self._ensure_bucket()
        return await pipeline.publish(slug, body, version_id=version_id)

    async def make_live(
        self,
        slug: str,
        *,
        title: str | None = None,
        default_channel: Any = None,
        flags: dict[str, Any] | None = None,
    ) -> MakeLiveResult:
        pipeline = self._require_pipeline()
        await self._ensure_bucket()
        return await pipeline.make_live(slug, title=title, default_channel=default_channel, flags=flags)

    # ------------------------------------------------------------------
    # Recentering
    # ------------------------------------------------------------------

    async def recenter(
        self,
        slug: str,
        channel: Any,
        new_center: LatLng | dict[str, Any],
        *,
        mode: RecenterMode | str,
    ) -> RecenterResult:
        """Move the channel's pins to *new_center*.

        Parameters
        ----------
        slug : str
            Title slug.
        channel : str
            ``draft`` or ``published``.
        new_center : LatLng or dict
            Target center with finite ``lat``/``lng``.
        mode : RecenterMode
            Required. ``relative`` shifts every pin by the planar delta
            between the old and new center; ``absolute`` snaps every pin
            onto *new_center*.
        """
        pipeline = self._require_pipeline()
        await self._ensure_bucket()
        return await pipeline.recenter(slug, channel, new_center, mode=mode)

    async def recenter_all_pins_to(
        self,
        slug: str,
        channel: Any,
        new_center: LatLng | dict[str, Any],
    ) -> RecenterResult:
        """Snap every pin of the channel onto *new_center* (layout discarded)."""
        return await self.recenter(slug, channel, new_center, mode=RecenterMode.ABSOLUTE)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def load(self, slug: str, channel: Any) -> ChannelCurrent | None:
        return await self._require_pipeline().load(slug, channel)

    async def load_live(self, slug: str) -> LiveMirror | None:
        return await self._require_pipeline().load_live(slug)

    async def get_index(self, slug: str) -> VersionIndex | None:
        return await self._require_pipeline().get_index(slug)

    async def load_version(self, slug: str, version_id: str) -> Snapshot:
        return await self._require_pipeline().load_version(slug, version_id)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    async def selftest(self) -> SelftestReport:
        """Check configuration and storage write access.

        Storage failures are reported in the returned report, not raised.
        """
        store = self._require_store()
        env = {
            "SUPABASE_URL": bool(self._config.supabase_url),
            "SUPABASE_SERVICE_ROLE_KEY": bool(self._config.service_role_key),
        }
        snapshots = SnapshotStore(store)
        try:
            await store.ensure_bucket()
            self._bucket_ready = True
            await snapshots.put(HEALTH_PROBE_PATH, {"probe": secrets.token_hex(8), "t": self._clock()})
        except GameSyncStorageError as exc:
            _logger.debug("Selftest storage failed", exc_info=True)
            return SelftestReport(ok=False, env=env, bucket=self._config.bucket, write=False, error=str(exc))
        return SelftestReport(ok=True, env=env, bucket=self._config.bucket, write=True)
