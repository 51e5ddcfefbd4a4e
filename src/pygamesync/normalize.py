"""Normalization helpers.

Parsing of values crossing the public boundary.
Every channel value must go through :func:`normalize_channel` so that
draft/published decisions are made identically everywhere.
"""

from __future__ import annotations

import math
from typing import Any

from pygamesync.exceptions import GameSyncValidationError
from pygamesync.models.channel import normalize_channel

__all__ = [
    "env_bool",
    "is_finite_number",
    "normalize_channel",
    "normalize_slug",
    "normalize_version_id",
]


def normalize_slug(value: Any) -> str:
    """Return a trimmed, lower-cased slug or raise on empty input."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    slug = str(value if value is not None else "").strip().lower()
    if not slug:
        raise GameSyncValidationError("Missing slug", field="slug")
    if "/" in slug or slug in {".", ".."}:
        raise GameSyncValidationError(f"Invalid slug: {slug!r}", field="slug")
    return slug


def normalize_version_id(value: Any) -> str:
    """Validate a caller-supplied version id so it is safe to embed in a key."""
    version_id = str(value if value is not None else "").strip()
    if not version_id:
        raise GameSyncValidationError("Missing versionId", field="version_id")
    if "/" in version_id or "\\" in version_id or version_id in {".", ".."}:
        raise GameSyncValidationError(f"Invalid versionId: {version_id!r}", field="version_id")
    return version_id


def is_finite_number(value: Any) -> bool:
    """True for real ``int``/``float`` values that are finite (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default
