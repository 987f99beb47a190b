"""
Main API router. Mounts all sub-routers.
"""

from fastapi import APIRouter

from ..core.flags import get_flags
from ..core.locales import ACCESSORY_OPTIONS, COLOR_OPTIONS, Language
from ..models.options import CaptionStrategy, Quality
from .sessions import sessions_router

router = APIRouter()


# ── Health ───────────────────────────────────────────────────────────

@router.get("/health")
async def health():
    return {"status": "ok", "service": "snapstyle"}


# ── Static option tables ─────────────────────────────────────────────

@router.get("/v1/options/{language}")
async def option_tables(language: Language):
    """Fixed lists the UI shows next to the analysed suggestions."""
    flags = get_flags()
    return {
        "language": language.value,
        "accessory": ACCESSORY_OPTIONS[language],
        "clothing_color": COLOR_OPTIONS[language],
        "qualities": [
            q.value for q in Quality
            if q is Quality.STANDARD or flags.enable_high_quality
        ],
        "caption_strategies": (
            [s.value for s in CaptionStrategy] if flags.enable_captions else []
        ),
    }


# ── V1 routes ────────────────────────────────────────────────────────

router.include_router(sessions_router, prefix="/v1")
