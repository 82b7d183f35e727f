"""Kiosk document models using Pydantic."""

import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Slide limits
MIN_SLIDE_TIME = 4000
DEFAULT_SLIDE_TIME = 8000
DEFAULT_ACCENT_COLOR = "#4CAF50"

# Global settings limits
DEFAULT_THEME = "default"
DEFAULT_TITLE_FONT_SIZE = 48
DEFAULT_DESCRIPTION_FONT_SIZE = 24
MIN_TITLE_FONT_SIZE = 32
MAX_TITLE_FONT_SIZE = 72
MIN_DESCRIPTION_FONT_SIZE = 16
MAX_DESCRIPTION_FONT_SIZE = 36
MIN_WATERMARK_SIZE = 20
MAX_WATERMARK_SIZE = 200
MIN_WATERMARK_OPACITY = 1
MAX_WATERMARK_OPACITY = 100

WATERMARK_POSITIONS = ("top-left", "top-right", "bottom-left", "bottom-right")
WatermarkPosition = Literal["top-left", "top-right", "bottom-left", "bottom-right"]

HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class Watermark(BaseModel):
    """Watermark overlay shown on the display page."""
    model_config = ConfigDict(extra="allow")

    enabled: bool = Field(default=False)
    position: WatermarkPosition = Field(default="bottom-right")
    size: int = Field(default=100, ge=MIN_WATERMARK_SIZE, le=MAX_WATERMARK_SIZE)
    opacity: int = Field(default=50, ge=MIN_WATERMARK_OPACITY, le=MAX_WATERMARK_OPACITY)
    image: str = Field(default="")


class GlobalSettings(BaseModel):
    """Document-wide display configuration."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    theme: str = Field(default=DEFAULT_THEME, min_length=1)
    title_font_size: int = Field(
        default=DEFAULT_TITLE_FONT_SIZE, ge=MIN_TITLE_FONT_SIZE, le=MAX_TITLE_FONT_SIZE,
        alias="titleFontSize"
    )
    description_font_size: int = Field(
        default=DEFAULT_DESCRIPTION_FONT_SIZE, ge=MIN_DESCRIPTION_FONT_SIZE, le=MAX_DESCRIPTION_FONT_SIZE,
        alias="descriptionFontSize"
    )
    watermark: Optional[Watermark] = Field(default=None)
    performance: Optional[Dict[str, bool]] = Field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted camelCase form."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Slide(BaseModel):
    """One timed entry in the display rotation."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int = Field(..., ge=1)
    text: str = Field(default="")
    description: str = Field(default="")
    image: str = Field(default="")
    accent_color: str = Field(default=DEFAULT_ACCENT_COLOR, alias="accentColor")
    time: Optional[int] = Field(default=None)
    visibility: bool = Field(default=True)

    @field_validator("text", "description", "image", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        """Treat null text fields as empty."""
        return "" if v is None else v

    @field_validator("accent_color", mode="before")
    @classmethod
    def validate_accent_color(cls, v):
        """Validate #RRGGBB accent color."""
        if v is None or v == "":
            return DEFAULT_ACCENT_COLOR
        if not isinstance(v, str) or not HEX_COLOR.match(v):
            raise ValueError("Accent color must be a #RRGGBB hex string")
        return v

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        """Enforce minimum slide duration."""
        if v is not None and v < MIN_SLIDE_TIME:
            raise ValueError("Slide time must be at least 4 seconds")
        return v

    @model_validator(mode="after")
    def require_content(self):
        """A slide needs text or an image."""
        if not self.text.strip() and not self.image.strip():
            raise ValueError("Slide must have either text or image")
        return self

    @property
    def display_time(self) -> int:
        """Effective display duration in milliseconds."""
        return self.time if self.time is not None else DEFAULT_SLIDE_TIME

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted camelCase form."""
        return self.model_dump(by_alias=True)


class KioskDocument(BaseModel):
    """Global settings plus the ordered slide list."""
    model_config = ConfigDict(populate_by_name=True)

    global_settings: GlobalSettings = Field(default_factory=GlobalSettings, alias="globalSettings")
    slides: List[Slide] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted camelCase form."""
        return {
            "globalSettings": self.global_settings.to_dict(),
            "slides": [slide.to_dict() for slide in self.slides],
        }
