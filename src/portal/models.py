"""Pydantic models for portal API."""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator

from kiosk.models import MIN_SLIDE_TIME, WatermarkPosition


def _check_slide_time(v):
    if v is not None and v < MIN_SLIDE_TIME:
        raise ValueError("Slide time must be at least 4 seconds")
    return v


class SlideCreateRequest(BaseModel):
    """Request to create a slide."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    text: str = Field(default="", description="Slide title")
    description: str = Field(default="", description="Slide body text")
    image: str = Field(default="", description="Image path or URL")
    accent_color: Optional[str] = Field(default=None, alias="accentColor", description="#RRGGBB background")
    time: Optional[int] = Field(default=None, description="Display time in ms, null for default")
    visibility: bool = Field(default=True, description="Shown on the display page")

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        """Validate minimum slide time."""
        return _check_slide_time(v)

    def to_data(self) -> Dict[str, Any]:
        """Slide fields as sent by the client."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        data.pop("id", None)
        data["time"] = self.time
        return data


class SlideUpdateRequest(BaseModel):
    """Request to update a slide. Only provided fields change."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    text: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    image: Optional[str] = Field(default=None)
    accent_color: Optional[str] = Field(default=None, alias="accentColor")
    time: Optional[int] = Field(default=None)
    visibility: Optional[bool] = Field(default=None)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        """Validate minimum slide time."""
        return _check_slide_time(v)

    def to_patch(self) -> Dict[str, Any]:
        """Fields explicitly set by the client."""
        patch = self.model_dump(by_alias=True, exclude_unset=True)
        patch.pop("id", None)
        return patch


class WatermarkRequest(BaseModel):
    """Watermark settings as sent by the admin page."""
    model_config = ConfigDict(extra="allow")

    enabled: bool = Field(default=False)
    position: WatermarkPosition = Field(default="bottom-right")
    size: int = Field(default=100)
    opacity: int = Field(default=50)
    image: str = Field(default="")


class GlobalSettingsRequest(BaseModel):
    """Request to update global settings. Only provided fields change."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    theme: Optional[str] = Field(default=None)
    title_font_size: Optional[int] = Field(default=None, alias="titleFontSize")
    description_font_size: Optional[int] = Field(default=None, alias="descriptionFontSize")
    watermark: Optional[WatermarkRequest] = Field(default=None)
    performance: Optional[Dict[str, bool]] = Field(default=None)

    def to_patch(self) -> Dict[str, Any]:
        """Fields explicitly set by the client."""
        return self.model_dump(by_alias=True, exclude_unset=True)


# Response models

class SlidesResponse(BaseModel):
    """Slide list after a change."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    updated_data: List[Dict[str, Any]] = Field(..., alias="updatedData")


class SlideResponse(BaseModel):
    """Single slide after an update."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    updated_entry: Dict[str, Any] = Field(..., alias="updatedEntry")


class SettingsResponse(BaseModel):
    """Global settings after an update."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    global_settings: Dict[str, Any] = Field(..., alias="globalSettings")


class UploadResponse(BaseModel):
    """Public path of a stored upload."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    image_path: str = Field(..., alias="imagePath")


class ImportResponse(BaseModel):
    """Result of a configuration import."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    slides_count: int = Field(..., alias="slidesCount")


class HealthResponse(BaseModel):
    """Service health."""
    status: str
    store_present: bool
    disk_free_mb: int
    theme_count: int


class ErrorResponse(BaseModel):
    """Error response."""
    success: bool = False
    message: str
    issues: Optional[List[str]] = None
