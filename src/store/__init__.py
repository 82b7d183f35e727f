"""Kiosk Store - Durable, write-serialized persistence for the kiosk document."""

from .kiosk_store import KioskStore, default_document
from .exceptions import StoreError, SerializationError, CorruptStoreError, StoreIOError

__all__ = [
    "KioskStore", "default_document",
    "StoreError", "SerializationError", "CorruptStoreError", "StoreIOError",
]
