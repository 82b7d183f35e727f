"""Kiosk Portal Service - Admin API, uploads and the display page."""

from .server import PortalServer, PortalService
from .api import APIRouter
from .uploads import UploadStorage
from .models import SlideCreateRequest, SlideUpdateRequest, GlobalSettingsRequest

__all__ = [
    "PortalServer", "PortalService", "APIRouter", "UploadStorage",
    "SlideCreateRequest", "SlideUpdateRequest", "GlobalSettingsRequest",
]
