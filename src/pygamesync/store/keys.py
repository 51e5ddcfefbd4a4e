"""Object-store key layout.

::

    <slug>/index.json                  version index
    <slug>/versions/<versionId>.json   immutable snapshot
    <slug>/draft/current.json          {versionId, path, snapshot}
    <slug>/published/current.json      {versionId, path, snapshot}
    <slug>/live/current.json           live mirror

Media references use the channel-first layout
``<channel>/<prefix>/<subpath>`` (e.g. ``draft/mediapool/hero.png``).
"""

from __future__ import annotations

import re
from typing import Any

from pygamesync._constants import CURRENT_FILE, DEFAULT_MEDIA_PREFIX, INDEX_FILE, LIVE_DIR, VERSIONS_DIR
from pygamesync.models.channel import Channel, normalize_channel

_MULTI_SLASH = re.compile(r"/+")


def _join(*parts: str) -> str:
    return _MULTI_SLASH.sub("/", "/".join(parts)).lstrip("/")


def index_path(slug: str) -> str:
    return _join(slug, INDEX_FILE)


def version_path(slug: str, version_id: str) -> str:
    return _join(slug, VERSIONS_DIR, f"{version_id}.json")


def channel_current_path(slug: str, channel: Channel) -> str:
    return _join(slug, channel.value, CURRENT_FILE)


def channel_pointer_path(channel: Channel) -> str:
    """Slug-relative path recorded in the index (``draft/current.json``)."""
    return _join(channel.value, CURRENT_FILE)


def live_mirror_path(slug: str) -> str:
    return _join(slug, LIVE_DIR, CURRENT_FILE)


def _clean_prefix(prefix: str) -> str:
    return prefix.strip("/") or DEFAULT_MEDIA_PREFIX


def media_pool_prefix(channel: Any = Channel.DRAFT, *, prefix: str = DEFAULT_MEDIA_PREFIX) -> str:
    """``draft/mediapool/`` or ``published/mediapool/``."""
    return f"{normalize_channel(channel).value}/{_clean_prefix(prefix)}/"

