"""Custom exception hierarchy for pygamesync."""

from __future__ import annotations


class GameSyncError(Exception):
    """Base exception for all pygamesync errors."""


class GameSyncConfigError(GameSyncError):
    """Invalid or missing configuration."""


class GameSyncValidationError(GameSyncError):
    """Caller supplied a missing or malformed field (never retried)."""

    def __init__(self, message: str, *, field: str = "") -> None:
        self.field = field
        super().__init__(message)


class GameSyncStorageError(GameSyncError):
    """Object-store failure (network, permission, missing bucket, timeout).

    Safe to retry the whole operation: every write is keyed by a version
    id, so replaying the same request converges on the same documents.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        path: str = "",
    ) -> None:
        self.status_code = status_code
        self.path = path
        super().__init__(message)


class GameSyncConflictError(GameSyncStorageError):
    """A conditional write lost its race against a concurrent writer.

    Raised by the version index once its retry budget is exhausted.
    Callers may retry the operation.
    """


class GameSyncNotFoundError(GameSyncError):
    """A document required by the operation does not exist."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class GameSyncCorruptDataError(GameSyncError):
    """A stored document exists but cannot be parsed or validated."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)
