"""Kiosk slide and settings exceptions."""

from typing import List, Optional


class KioskError(Exception):
    """Base class for kiosk content errors."""
    pass


class NotFoundError(KioskError):
    """Raised when a slide id does not exist."""

    def __init__(self, message: str, slide_id: Optional[int] = None):
        super().__init__(message)
        self.slide_id = slide_id


class ValidationError(KioskError):
    """Raised when slides or settings break a content rule."""

    def __init__(self, message: str, issues: Optional[List[str]] = None):
        super().__init__(message)
        self.issues = issues or []
