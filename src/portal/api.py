"""Portal API router implementation."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil
from fastapi import Body, File, HTTPException, UploadFile

from .models import (
    SlideCreateRequest, SlideUpdateRequest, GlobalSettingsRequest,
    SlidesResponse, SlideResponse, SettingsResponse, UploadResponse,
    ImportResponse, HealthResponse
)
from .uploads import UploadStorage
from kiosk import KioskManager, KioskError, NotFoundError, ValidationError
from store import StoreError


class APIRouter:
    """API router for kiosk endpoints."""

    def __init__(self, kiosk_manager: KioskManager, uploads: UploadStorage):
        """Initialize API router."""
        self.kiosk_manager = kiosk_manager
        self.store = kiosk_manager.store
        self.themes = kiosk_manager.themes
        self.uploads = uploads
        self.logger = logging.getLogger(__name__)
        # Import here to avoid name conflict
        from fastapi import APIRouter as FastAPIRouter
        self.router = FastAPIRouter()
        self._setup_routes()

    def _http_error(self, error: Exception, failure_message: str) -> HTTPException:
        """Translate a kiosk or store error into an HTTP error."""
        if isinstance(error, NotFoundError):
            return HTTPException(status_code=404, detail=str(error))
        if isinstance(error, ValidationError):
            return HTTPException(status_code=400, detail={"message": str(error), "issues": error.issues})
        self.logger.error(f"{failure_message}: {error}")
        return HTTPException(status_code=500, detail=failure_message)

    def _setup_routes(self):
        """Set up API routes."""

        # Slide endpoints
        @self.router.get("/kiosk", response_model=List[Dict[str, Any]])
        async def get_slides():
            """Get all slides."""
            try:
                return await self.kiosk_manager.list_slides()
            except StoreError as e:
                raise self._http_error(e, "Failed to retrieve slides.")

        @self.router.get("/kiosk/data")
        async def get_kiosk_data():
            """Get complete kiosk data (slides + settings)."""
            try:
                return await self.kiosk_manager.get_document()
            except StoreError as e:
                raise self._http_error(e, "Failed to read kiosk data.")

        @self.router.get("/kiosk/playlist", response_model=List[Dict[str, Any]])
        async def get_playlist():
            """Get visible slides with resolved display times."""
            try:
                return await self.kiosk_manager.playlist()
            except StoreError as e:
                raise self._http_error(e, "Failed to build playlist.")

        @self.router.get("/kiosk/{slide_id}", response_model=Dict[str, Any])
        async def get_slide(slide_id: int):
            """Get a single slide."""
            try:
                return await self.kiosk_manager.get_slide(slide_id)
            except (KioskError, StoreError) as e:
                raise self._http_error(e, "Failed to retrieve slide.")

        @self.router.post("/kiosk", response_model=SlidesResponse)
        async def create_slide(request: SlideCreateRequest):
            """Create a new slide."""
            try:
                slides = await self.kiosk_manager.create_slide(request.to_data())
                return SlidesResponse(updated_data=slides)
            except (KioskError, StoreError) as e:
                raise self._http_error(e, "Failed to add new item.")

        @self.router.post("/kiosk/reorder", response_model=SlidesResponse)
        async def reorder_slides(order: List[int] = Body(...)):
            """Reorder slides by id."""
            try:
                slides = await self.kiosk_manager.reorder_slides(order)
                return SlidesResponse(updated_data=slides)
            except (KioskError, StoreError) as e:
                raise self._http_error(e, "Failed to reorder items.")

        @self.router.put("/kiosk/{slide_id}", response_model=SlideResponse)
        async def update_slide(slide_id: int, request: SlideUpdateRequest):
            """Update an existing slide."""
            try:
                entry = await self.kiosk_manager.update_slide(slide_id, request.to_patch())
                return SlideResponse(updated_entry=entry)
            except (KioskError, StoreError) as e:
                raise self._http_error(e, "Failed to update item.")

        @self.router.delete("/kiosk/{slide_id}", response_model=SlidesResponse)
        async def delete_slide(slide_id: int):
            """Delete a slide."""
            try:
                slides = await self.kiosk_manager.delete_slide(slide_id)
                return SlidesResponse(updated_data=slides)
            except (KioskError, StoreError) as e:
                raise self._http_error(e, "Failed to delete item.")

        @self.router.post("/kiosk/{slide_id}/toggle-visibility", response_model=SlidesResponse)
        async def toggle_visibility(slide_id: int):
            """Toggle slide visibility."""
            try:
                slides = await self.kiosk_manager.toggle_visibility(slide_id)
                return SlidesResponse(updated_data=slides)
            except (KioskError, StoreError) as e:
                raise self._http_error(e, "Failed to toggle visibility.")

        # Settings endpoints
        @self.router.get("/global-settings", response_model=Dict[str, Any])
        async def get_global_settings():
            """Get global settings."""
            try:
                return await self.kiosk_manager.get_settings()
            except StoreError as e:
                raise self._http_error(e, "Failed to retrieve global settings.")

        @self.router.post("/global-settings", response_model=SettingsResponse)
        async def update_global_settings(request: GlobalSettingsRequest):
            """Update global settings."""
            try:
                settings = await self.kiosk_manager.update_settings(request.to_patch())
                return SettingsResponse(global_settings=settings)
            except (KioskError, StoreError) as e:
                raise self._http_error(e, "Failed to update global settings.")

        @self.router.get("/themes", response_model=Dict[str, Dict[str, Any]])
        async def get_themes():
            """Get the theme registry."""
            return self.themes.to_dict()

        # Upload endpoints
        @self.router.post("/upload", response_model=UploadResponse)
        async def upload_image(image: Optional[UploadFile] = File(None)):
            """Store a slide image."""
            if image is None or not image.filename:
                raise HTTPException(status_code=400, detail="No file uploaded")
            try:
                path = await self.uploads.save_image(image)
                return UploadResponse(image_path=path)
            except OSError as e:
                raise self._http_error(e, "Failed to upload image")

        @self.router.post("/upload-watermark", response_model=UploadResponse)
        async def upload_watermark(watermark: Optional[UploadFile] = File(None)):
            """Store a watermark image."""
            if watermark is None or not watermark.filename:
                raise HTTPException(status_code=400, detail="No file uploaded")
            try:
                path = await self.uploads.save_watermark(watermark)
                return UploadResponse(image_path=path)
            except OSError as e:
                raise self._http_error(e, "Failed to upload watermark")

        # Import / export endpoints
        @self.router.post("/import-config", response_model=ImportResponse)
        async def import_config(config: Dict[str, Any] = Body(...)):
            """Replace the kiosk data with an imported configuration."""
            try:
                count = await self.kiosk_manager.import_document(config)
                return ImportResponse(
                    message="Configuration imported successfully",
                    slides_count=count
                )
            except (KioskError, StoreError) as e:
                raise self._http_error(e, "Failed to import configuration")

        @self.router.get("/kiosk.json")
        async def export_config():
            """Export the kiosk data for download."""
            try:
                return await self.kiosk_manager.export_document()
            except StoreError as e:
                raise self._http_error(e, "Failed to export configuration")

        # Health check
        @self.router.get("/health", response_model=HealthResponse)
        async def health_check():
            """Health check endpoint."""
            data_dir = self.store.data_dir if self.store.data_dir.is_dir() else Path.cwd()
            disk = psutil.disk_usage(str(data_dir))
            return HealthResponse(
                status="healthy",
                store_present=self.store.exists(),
                disk_free_mb=disk.free // 1024 // 1024,
                theme_count=len(self.themes.available_themes())
            )

    def get_router(self):
        """Get the FastAPI router."""
        return self.router
