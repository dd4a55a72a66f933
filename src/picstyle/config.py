"""Environment-based configuration for PicStyle."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from PICSTYLE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PICSTYLE_",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000

    # Authentication (None = disabled)
    api_key: str | None = None

    # Concurrency
    max_concurrent: int = Field(default=2, ge=1)

    # Input limits
    max_file_size: int = Field(default=10 * 1024 * 1024, ge=1)
    max_image_pixels: int = Field(default=40_000_000, ge=1)

    # Storage
    output_dir: str = "outputs"

    # Thumbnail artifact
    thumbnail_size: int = Field(default=200, ge=1)
    thumbnail_quality: float = Field(default=0.8, gt=0.0, le=1.0)

    # Outline and colored artifacts
    canvas_max_width: int = Field(default=800, ge=1)
    canvas_max_height: int = Field(default=600, ge=1)
    artifact_quality: float = Field(default=0.9, gt=0.0, le=1.0)

    # Templates
    min_template_images: int = Field(default=5, ge=1)
    max_template_images: int = Field(default=10, ge=1)


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
