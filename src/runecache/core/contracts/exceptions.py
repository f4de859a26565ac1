"""Exception hierarchy for runecache."""

from __future__ import annotations


class RuneCacheError(Exception):
    """Base exception for all runecache errors."""


class ConfigError(RuneCacheError):
    """Configuration loading or validation failure."""


class RemoteError(RuneCacheError):
    """Remote data source operation failure."""

    def __init__(self, message: str, *, operation: str | None = None, retryable: bool = False) -> None:
        super().__init__(message)
        self.operation = operation
        self.retryable = retryable


class AuthenticationError(RemoteError):
    """Missing or rejected remote credentials."""


class StoreError(RuneCacheError):
    """Persistent store open/read/write failure."""


class SchemaError(StoreError):
    """Stored schema could not be migrated to the expected version."""


class VisitedStatusError(RuneCacheError):
    """Remote visited-status mutation failed; local state was left unchanged."""

    def __init__(self, message: str, *, item_id: int) -> None:
        super().__init__(message)
        self.item_id = item_id
