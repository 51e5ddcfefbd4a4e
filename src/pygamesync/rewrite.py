"""Retarget channel-scoped references when content is promoted.

Media uploaded while editing a draft lives under ``draft/<prefix>/...``
(or the legacy ``<prefix>/draft/...``). Publishing must point those
references at ``published/<prefix>/...``. Only string leaves of the JSON
tree are rewritten. A reference matches wherever it is not glued to a
preceding path-segment character (letter, digit, ``_``, ``.`` or ``-``),
so references embedded in markup or prose are retargeted while words
like "predraft" are untouched.
A reference already preceded by ``published/`` is never matched, which
keeps the rewrite idempotent.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pygamesync._constants import DEFAULT_MEDIA_PREFIX
from pygamesync.models.channel import Channel
from pygamesync.store.keys import media_pool_prefix

_logger = logging.getLogger(__name__)


class ContentRewriter:
    """Rewrites draft media references to their published equivalents."""

    def __init__(self, *, media_prefix: str = DEFAULT_MEDIA_PREFIX) -> None:
        pool = re.escape(media_prefix.strip("/") or DEFAULT_MEDIA_PREFIX)
        draft = re.escape(Channel.DRAFT.value)
        published = re.escape(Channel.PUBLISHED.value)
        self._pattern = re.compile(
            rf"(?<![\w.-])(?<!{published}/)(?:{draft}/{pool}|{pool}/{draft})/",
        )
        self._replacement = media_pool_prefix(Channel.PUBLISHED, prefix=media_prefix)

    def rewrite_string(self, value: str) -> str:
        return self._pattern.sub(lambda _match: self._replacement, value)

    def _rewrite(self, node: Any) -> Any:
        if isinstance(node, str):
            return self.rewrite_string(node)
        if isinstance(node, dict):
            return {key: self._rewrite(value) for key, value in node.items()}
        if isinstance(node, list):
            return [self._rewrite(item) for item in node]
        return node

    def rewrite_for_promotion(self, document: Any) -> Any:
        """Return a rewritten copy of *document*; the input is not mutated.

        A document that is not plain JSON is returned unchanged.
        """
        try:
            json.dumps(document, allow_nan=False)
        except (TypeError, ValueError) as exc:
            _logger.warning("Skipping promotion rewrite, document is not plain JSON: %s", exc)
            return document
        return self._rewrite(document)
