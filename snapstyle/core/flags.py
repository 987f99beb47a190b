"""
Central feature flags.

Set via environment variables (prefix FF_) or .env file.
When a flag is OFF, the related feature degrades quietly. Nothing crashes.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Credentials ──────────────────────────────────────────────────
    use_credential_check: bool = Field(default=True, alias="FF_USE_CREDENTIAL_CHECK")
    # ON  → Before a high-quality render, ask the credential provider whether
    #       a paid key is selected. Failures are logged and ignored.
    # OFF → No pre-check. Rendering goes straight to Gemini.

    # ── Quality tiers ────────────────────────────────────────────────
    enable_high_quality: bool = Field(default=True, alias="FF_ENABLE_HIGH_QUALITY")
    # ON  → "high" renders use IMAGE_MODEL_HIGH at HIGH_QUALITY_IMAGE_SIZE.
    # OFF → "high" requests are downgraded to the standard model.

    # ── Captions ─────────────────────────────────────────────────────
    enable_captions: bool = Field(default=True, alias="FF_ENABLE_CAPTIONS")
    # OFF → Caption endpoint answers 404. Image flow is unaffected.


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()
