"""Kiosk store exceptions."""

from typing import Optional


class StoreError(Exception):
    """Base class for kiosk store errors."""
    pass


class SerializationError(StoreError):
    """Raised when a document cannot be serialized to JSON."""
    pass


class CorruptStoreError(StoreError):
    """Raised when the persisted document exists but cannot be parsed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class StoreIOError(StoreError):
    """Raised when a filesystem operation on the store fails."""

    def __init__(self, message: str, os_error: Optional[OSError] = None):
        super().__init__(message)
        self.os_error = os_error
