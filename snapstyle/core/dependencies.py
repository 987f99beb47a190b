"""
FastAPI dependencies. Injected into route handlers.
"""

from functools import lru_cache

from fastapi import HTTPException, status

from .config import get_settings
from .flags import get_flags
from ..orchestrator.controller import StudioController
from ..services.credentials import SettingsCredentialProvider
from ..services.session_store import get_session_store


@lru_cache
def get_controller() -> StudioController:
    """Process-wide controller wired from settings and feature flags."""
    settings = get_settings()
    flags = get_flags()
    return StudioController(
        store=get_session_store(),
        credentials=SettingsCredentialProvider() if flags.use_credential_check else None,
        allow_high_quality=flags.enable_high_quality,
        max_upload_bytes=settings.max_upload_bytes,
    )


def require_captions() -> None:
    """404 when captions are switched off (FF_ENABLE_CAPTIONS=false)."""
    if not get_flags().enable_captions:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Caption generation is disabled",
        )
