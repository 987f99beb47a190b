"""
SnapStyle settings. Read from the environment or a .env file.

Model names are per role so a deployment can pin or swap one without
touching the others.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Environment ---
    env: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="DEBUG")

    # --- Gemini ---
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    analysis_model: str = Field(default="gemini-2.5-flash", alias="ANALYSIS_MODEL")
    caption_model: str = Field(default="gemini-2.5-flash", alias="CAPTION_MODEL")
    image_model_standard: str = Field(default="gemini-2.5-flash-image", alias="IMAGE_MODEL_STANDARD")
    image_model_high: str = Field(default="gemini-3-pro-image-preview", alias="IMAGE_MODEL_HIGH")
    high_quality_image_size: str = Field(default="2K", alias="HIGH_QUALITY_IMAGE_SIZE")
    # Per-request timeout for Gemini calls. A timed-out advisory call falls back.
    gemini_timeout_seconds: float = Field(default=120.0, alias="GEMINI_TIMEOUT_SECONDS")

    # --- Uploads ---
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    # --- Sessions ---
    session_ttl_seconds: int = Field(default=60 * 60, alias="SESSION_TTL_SECONDS")

    # --- HTTP ---
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    @property
    def cors_origin_list(self) -> list[str]:
        """CORS_ORIGINS split on commas. "*" allows any origin."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()] or ["*"]

    @property
    def is_development(self) -> bool:
        return self.env == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
