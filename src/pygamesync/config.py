"""Client configuration for pygamesync."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pygamesync._constants import DEFAULT_BUCKET, DEFAULT_MEDIA_PREFIX
from pygamesync.models.channel import Channel, normalize_channel
from pygamesync.normalize import env_bool


@dataclasses.dataclass(frozen=True)
class GameSyncConfig:
    """Client configuration.

    Parameters
    ----------
    supabase_url : str
        Supabase project URL (``https://<ref>.supabase.co``).
    service_role_key : str
        Service-role key used for storage reads and writes.
    bucket : str
        Storage bucket holding game configurations.
    request_timeout : float
        Total timeout in seconds applied to every storage request.
    ensure_bucket : bool
        Create the bucket on first write when it does not exist.
    bucket_public : bool
        Visibility of a bucket created by ``ensure_bucket``.
    bucket_file_size_limit : str
        File size limit of a bucket created by ``ensure_bucket``.
    conditional_writes : bool
        Send ``If-Match``/``If-None-Match`` preconditions when saving the
        version index. Only enable against a store that honors them.
    index_retry_attempts : int
        How many times a version-index update is retried after losing a
        conditional-write race.
    default_channel : Channel
        Live channel given to a freshly created index when the request
        does not name one.
    media_pool_prefix : str
        Path segment of the shared media pool (``draft/<prefix>/...``).
    api_trace_enabled : bool
        Log (redacted) request headers at DEBUG level.
    """

    supabase_url: str = ""
    service_role_key: str = ""
    bucket: str = DEFAULT_BUCKET
    request_timeout: float = 30.0
    ensure_bucket: bool = True
    bucket_public: bool = True
    bucket_file_size_limit: str = "50mb"
    conditional_writes: bool = False
    index_retry_attempts: int = 3
    default_channel: Channel = Channel.DRAFT
    media_pool_prefix: str = DEFAULT_MEDIA_PREFIX
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_channel", normalize_channel(self.default_channel))

    @classmethod
    def from_env(cls, **overrides: Any) -> GameSyncConfig:
        """Create configuration from environment variables.

        Reads ``SUPABASE_URL``, ``SUPABASE_SERVICE_ROLE_KEY``,
        ``GAME_CONFIG_BUCKET`` and optional ``GAMESYNC_*`` variables.
        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "SUPABASE_URL": "supabase_url",
            "SUPABASE_SERVICE_ROLE_KEY": "service_role_key",
            "GAME_CONFIG_BUCKET": "bucket",
            "GAMESYNC_BUCKET_FILE_SIZE_LIMIT": "bucket_file_size_limit",
            "GAMESYNC_DEFAULT_CHANNEL": "default_channel",
            "GAMESYNC_MEDIA_PREFIX": "media_pool_prefix",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("GAMESYNC_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        retries_env = env.get("GAMESYNC_INDEX_RETRY_ATTEMPTS")
        if retries_env is not None and "index_retry_attempts" not in overrides:
            config_kwargs["index_retry_attempts"] = int(retries_env)

        _ENV_BOOL_MAP = {
            "GAMESYNC_ENSURE_BUCKET": ("ensure_bucket", True),
            "GAMESYNC_BUCKET_PUBLIC": ("bucket_public", True),
            "GAMESYNC_CONDITIONAL_WRITES": ("conditional_writes", False),
            "GAMESYNC_API_TRACE_ENABLED": ("api_trace_enabled", False),
        }
        for env_key, (field_name, default) in _ENV_BOOL_MAP.items():
            if field_name not in overrides:
                config_kwargs[field_name] = env_bool(env.get(env_key), default)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
