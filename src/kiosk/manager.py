"""Kiosk manager that coordinates slides and settings against the store."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import ValidationError as SchemaError

from .exceptions import NotFoundError, ValidationError
from .models import GlobalSettings, KioskDocument, Slide
from .themes import ThemeRegistry
from store import KioskStore


EXPORT_VERSION = "1.0"


def _format_issues(error: SchemaError) -> List[str]:
    """Flatten pydantic errors into readable strings."""
    issues = []
    for err in error.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        message = err.get("msg", "invalid value")
        issues.append(f"{location}: {message}" if location else message)
    return issues


class KioskManager:
    """Manages slide content and global display settings.

    Every change runs as a store transaction, so a rejected change leaves
    the persisted document untouched and concurrent edits are not lost.
    """

    def __init__(self, store: KioskStore, themes: ThemeRegistry):
        """Initialize kiosk manager."""
        self.store = store
        self.themes = themes
        self.logger = logging.getLogger(__name__)

    # Reads

    async def get_document(self) -> Dict[str, Any]:
        """Get the complete document."""
        return await self.store.read()

    async def list_slides(self) -> List[Dict[str, Any]]:
        """Get all slides in display order."""
        document = await self.store.read()
        return document.get("slides", [])

    async def get_slide(self, slide_id: int) -> Dict[str, Any]:
        """Get a single slide."""
        slides = await self.list_slides()
        return slides[self._find_index(slides, slide_id)]

    async def playlist(self) -> List[Dict[str, Any]]:
        """Get the visible slides with their effective display time."""
        slides = await self.list_slides()
        entries = []
        for slide in slides:
            if slide.get("visibility") is False:
                continue
            try:
                model = Slide.model_validate(slide)
            except SchemaError as e:
                self.logger.warning(f"Skipping invalid slide {slide.get('id')} in playlist: {e}")
                continue
            entry = model.to_dict()
            entry["time"] = model.display_time
            entries.append(entry)
        return entries

    async def get_settings(self) -> Dict[str, Any]:
        """Get global settings."""
        document = await self.store.read()
        return document.get("globalSettings", {})

    # Slide changes

    async def create_slide(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Append a new slide with the next sequential id."""
        def apply(document):
            slides = document.setdefault("slides", [])
            slide = self._validate_slide({**data, "id": len(slides) + 1})
            slides.append(slide)

        document = await self.store.update(apply)
        slides = document["slides"]
        self.logger.info(f"Created slide {len(slides)}")
        return slides

    async def update_slide(self, slide_id: int, patch: Dict[str, Any]) -> Dict[str, Any]:
        """Merge changes into an existing slide."""
        def apply(document):
            slides = document.setdefault("slides", [])
            index = self._find_index(slides, slide_id)
            slides[index] = self._validate_slide({**slides[index], **patch, "id": slide_id})

        document = await self.store.update(apply)
        slides = document["slides"]
        self.logger.info(f"Updated slide {slide_id}")
        return slides[self._find_index(slides, slide_id)]

    async def delete_slide(self, slide_id: int) -> List[Dict[str, Any]]:
        """Remove a slide and renumber the rest."""
        def apply(document):
            slides = document.setdefault("slides", [])
            index = self._find_index(slides, slide_id)
            del slides[index]
            document["slides"] = self.reorganize_ids(slides)

        document = await self.store.update(apply)
        self.logger.info(f"Deleted slide {slide_id}")
        return document["slides"]

    async def reorder_slides(self, order: List[int]) -> List[Dict[str, Any]]:
        """Rearrange slides to follow the given id order."""
        def apply(document):
            slides = document.setdefault("slides", [])
            by_id = {slide.get("id"): slide for slide in slides}

            if len(set(order)) != len(order):
                raise ValidationError("Order contains duplicate ids")
            missing = [slide_id for slide_id in order if slide_id not in by_id]
            if missing:
                raise ValidationError("Some items were not found", [f"Unknown id {i}" for i in missing])
            if len(order) != len(slides):
                raise ValidationError("Order must list every slide exactly once")

            document["slides"] = self.reorganize_ids([by_id[slide_id] for slide_id in order])

        document = await self.store.update(apply)
        self.logger.info(f"Reordered {len(order)} slides")
        return document["slides"]

    async def toggle_visibility(self, slide_id: int) -> List[Dict[str, Any]]:
        """Flip a slide between shown and hidden."""
        def apply(document):
            slides = document.setdefault("slides", [])
            slide = slides[self._find_index(slides, slide_id)]
            slide["visibility"] = slide.get("visibility") is False

        document = await self.store.update(apply)
        return document["slides"]

    # Settings

    async def update_settings(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        """Merge changes into global settings."""
        def apply(document):
            current = document.get("globalSettings") or {}
            document["globalSettings"] = self._validate_settings({**current, **patch})

        document = await self.store.update(apply)
        self.logger.info("Global settings updated")
        return document["globalSettings"]

    # Import / export

    def validate_document(self, data: Any) -> List[str]:
        """List every problem that would stop a document from importing."""
        if not isinstance(data, dict) or "slides" not in data or "globalSettings" not in data:
            return ["Invalid configuration format - missing slides or globalSettings"]

        try:
            document = KioskDocument.model_validate(data)
        except SchemaError as e:
            return _format_issues(e)

        theme = document.global_settings.theme
        if not self.themes.is_valid_theme(theme):
            return [f"globalSettings.theme: unknown theme '{theme}'"]
        return []

    async def import_document(self, data: Dict[str, Any]) -> int:
        """Replace the whole document with an imported one."""
        issues = self.validate_document(data)
        if issues:
            raise ValidationError("Configuration validation failed", issues)

        document = KioskDocument.model_validate(data).to_dict()
        document["slides"] = self.reorganize_ids(document["slides"])

        await self.store.write(document)
        self.logger.info(f"Imported configuration with {len(document['slides'])} slides")
        return len(document["slides"])

    async def export_document(self) -> Dict[str, Any]:
        """Get the document with export metadata attached."""
        document = await self.store.read()
        return {
            **document,
            "exportMetadata": {
                "exportDate": datetime.now(timezone.utc).isoformat(),
                "version": EXPORT_VERSION,
                "slidesCount": len(document.get("slides", [])),
            },
        }

    # Helpers

    @staticmethod
    def reorganize_ids(slides: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Renumber slides 1..N in their current order."""
        return [{**slide, "id": index + 1} for index, slide in enumerate(slides)]

    @staticmethod
    def _find_index(slides: List[Dict[str, Any]], slide_id: int) -> int:
        for index, slide in enumerate(slides):
            if slide.get("id") == slide_id:
                return index
        raise NotFoundError(f"Slide {slide_id} not found", slide_id)

    def _validate_slide(self, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return Slide.model_validate(data).to_dict()
        except SchemaError as e:
            issues = _format_issues(e)
            raise ValidationError(issues[0] if len(issues) == 1 else "Invalid slide", issues) from e

    def _validate_settings(self, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            settings = GlobalSettings.model_validate(data)
        except SchemaError as e:
            issues = _format_issues(e)
            raise ValidationError(issues[0] if len(issues) == 1 else "Invalid global settings", issues) from e

        if not self.themes.is_valid_theme(settings.theme):
            raise ValidationError("Invalid theme selected", [f"theme: unknown theme '{settings.theme}'"])
        return settings.to_dict()
