"""Publishing channels."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class Channel(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"


def normalize_channel(value: Any, fallback: Any = Channel.DRAFT) -> Channel:
    """Coerce any input to a :class:`Channel`.

    Lists/tuples are unwrapped to their first element, the value is
    stripped and lower-cased, and only an exact ``"published"`` yields
    :attr:`Channel.PUBLISHED`. Everything else is a draft.
    """
    raw = value
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    if raw is None or raw == "":
        raw = fallback
        if isinstance(raw, (list, tuple)):
            raw = raw[0] if raw else None
    text = str(raw if raw is not None else "").strip().lower()
    return Channel.PUBLISHED if text == Channel.PUBLISHED.value else Channel.DRAFT
