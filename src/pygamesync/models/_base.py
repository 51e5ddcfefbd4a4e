"""Base model for stored game-configuration documents.

Every document model inherits from :class:`GameSyncBaseModel` which
provides:

* ``alias_generator=to_camel`` so the camelCase keys used in stored
  JSON map automatically to snake_case fields.
* ``populate_by_name`` so callers may build models with either form.
* :meth:`GameSyncBaseModel.to_document` which dumps the camelCase JSON
  shape that is written to the object store.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and ``Z`` suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class GameSyncBaseModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_document(self) -> dict[str, Any]:
        """JSON-ready dict keyed by the stored (camelCase) names."""
        return self.model_dump(mode="json", by_alias=True)
