"""Configuration management for the Nano Try-On session core."""

import logging

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class GeminiConfig(BaseModel):
    """Image generation provider settings."""
    model: str = "gemini-2.5-flash-image"
    garment_aspect_ratio: str = "1:1"  # Square for standalone garments
    tryon_aspect_ratio: str = "3:4"  # Portrait for full body


class FetchConfig(BaseModel):
    """Remote image fetch settings."""
    timeout: float = 30.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )


class PresetConfig(BaseModel):
    """Built-in assets seeded into every new session."""
    persons: list[str] = Field(default_factory=lambda: [
        "https://picsum.photos/seed/nano-tryon-person-1/600/800",
        "https://picsum.photos/seed/nano-tryon-person-2/600/800",
        "https://picsum.photos/seed/nano-tryon-person-3/600/800",
    ])
    garments: list[str] = Field(default_factory=lambda: [
        "https://picsum.photos/seed/nano-tryon-garment-1/600/600",
        "https://picsum.photos/seed/nano-tryon-garment-2/600/600",
        "https://picsum.photos/seed/nano-tryon-garment-3/600/600",
    ])


class TryOnConfig(BaseSettings):
    """Main session configuration."""

    # Gemini API key (loaded from .env as API_KEY)
    api_key: str | None = None

    # Sub-configs
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    presets: PresetConfig = Field(default_factory=PresetConfig)

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_prefix = ""
        env_nested_delimiter = "__"
        extra = "ignore"

    def setup_logging(self):
        """Configure root logging for the application."""
        logging.basicConfig(
            level=getattr(logging, self.log_level.upper(), logging.INFO),
            format=self.log_format,
        )


def load_config() -> TryOnConfig:
    """Load configuration from environment and defaults."""
    return TryOnConfig()
