"""Error types raised by the journal."""


class ValidationError(ValueError):
    """Raised when input data is rejected before any state change."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class StorageError(OSError):
    """Raised when a backend write fails after the cache was updated."""
