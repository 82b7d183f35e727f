"""Configuration schema definitions using Pydantic."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SystemConfig(BaseModel):
    """System-level configuration."""
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    syslog: bool = Field(default=True)


class ServerConfig(BaseModel):
    """HTTP server configuration."""
    bind_address: str = Field(default="0.0.0.0")
    bind_port: int = Field(default=3000, ge=1, le=65535)
    cors_enabled: bool = Field(default=True)
    title: str = Field(default="Kiosk", min_length=1, max_length=100)


class StorageConfig(BaseModel):
    """Data file and media locations."""
    data_file: str = Field(default="kiosk.json", min_length=1)
    upload_dir: str = Field(default="public/upload", min_length=1)
    watermark_dir: str = Field(default="public/watermarks", min_length=1)

    @field_validator("data_file")
    @classmethod
    def validate_data_file(cls, v):
        """Data file must name a JSON file."""
        if v.endswith("/"):
            raise ValueError("data_file must be a file path, not a directory")
        return v


class ThemesConfig(BaseModel):
    """Theme registry configuration."""
    registry_path: Optional[str] = Field(default=None)
    watch: bool = Field(default=True)


class Config(BaseModel):
    """Main configuration container."""
    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    system: SystemConfig = Field(default_factory=SystemConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    themes: ThemesConfig = Field(default_factory=ThemesConfig)
