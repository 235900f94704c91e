"""Exceptions raised by OffWorkLock services."""


class OffWorkLockError(RuntimeError):
    """Base class for domain exceptions."""


class StorageError(OffWorkLockError):
    """Raised when player records cannot be read from or written to storage."""

    def __init__(self, message: str, *, context: str | None = None) -> None:
        super().__init__(message)
        self.context = context


class ConfigError(OffWorkLockError, ValueError):
    """Raised when a configuration file cannot be parsed or fails validation."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])
