"""Kiosk content - Slides, global settings and the theme registry."""

from .manager import KioskManager
from .models import GlobalSettings, KioskDocument, Slide, Watermark
from .themes import ThemeRegistry
from .exceptions import KioskError, NotFoundError, ValidationError

__all__ = [
    "KioskManager", "GlobalSettings", "KioskDocument", "Slide", "Watermark",
    "ThemeRegistry", "KioskError", "NotFoundError", "ValidationError",
]
