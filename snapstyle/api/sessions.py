"""
Studio session API — one session per browser tab.

POST   /v1/sessions                     — Start a session
GET    /v1/sessions/{id}                — Current state (poll while analyzing/generating)
DELETE /v1/sessions/{id}                — Drop a session
PUT    /v1/sessions/{id}/language       — Switch UI language
POST   /v1/sessions/{id}/image          — Upload reference image (base64 / data URL)
POST   /v1/sessions/{id}/image/file     — Upload reference image (multipart, file picker or camera)
POST   /v1/sessions/{id}/options/...    — preset | custom | mode | viral | prompt
POST   /v1/sessions/{id}/generate       — Render the image
POST   /v1/sessions/{id}/adjust         — Back from result to options
POST   /v1/sessions/{id}/caption        — Write a social post for the result
POST   /v1/sessions/{id}/reset          — Start over
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from pydantic import BaseModel

from ..core.dependencies import get_controller, require_captions
from ..core.locales import Language
from ..models.content import SocialPost, Suggestions
from ..models.options import CaptionStrategy, OptionField, Quality, offered_labels
from ..models.session import Session
from ..orchestrator.controller import StudioController

logger = logging.getLogger(__name__)

sessions_router = APIRouter(prefix="/sessions", tags=["sessions"])


# ── Response models ──────────────────────────────────────────────────

class OptionsView(BaseModel):
    expression: Optional[str] = None
    clothing: Optional[str] = None
    scene: Optional[str] = None
    style: Optional[str] = None
    accessory: Optional[str] = None
    clothing_color: Optional[str] = None
    viral: bool = False
    manual_mode: bool = False
    custom_prompt: str = ""
    custom_fields: list[OptionField] = []
    ready: bool = False


class SessionView(BaseModel):
    session_id: str
    language: Language
    phase: str
    error: Optional[str] = None
    reference_image: Optional[str] = None          # data URL
    suggestions: Optional[Suggestions] = None
    options: OptionsView
    choices: dict[str, list[str]] = {}
    generated_image: Optional[str] = None          # data URL
    prompt: Optional[str] = None
    caption_strategy: Optional[CaptionStrategy] = None
    social_post: Optional[SocialPost] = None


def _view(session: Session) -> SessionView:
    options = session.options
    return SessionView(
        session_id=session.session_id,
        language=session.language,
        phase=session.phase.value,
        error=session.error,
        reference_image=session.reference_image.data_url if session.reference_image else None,
        suggestions=session.suggestions,
        options=OptionsView(
            expression=options.expression,
            clothing=options.clothing,
            scene=options.scene,
            style=options.style,
            accessory=options.accessory,
            clothing_color=options.clothing_color,
            viral=options.viral,
            manual_mode=options.manual_mode,
            custom_prompt=options.custom_prompt,
            custom_fields=sorted(options.custom_fields, key=lambda f: f.value),
            ready=options.ready_for_synthesis,
        ),
        choices={
            f.value: offered_labels(f, session.suggestions, session.language)
            for f in OptionField
        },
        generated_image=session.generated_image.image.data_url if session.generated_image else None,
        prompt=session.generated_image.prompt if session.generated_image else None,
        caption_strategy=session.caption_strategy,
        social_post=session.social_post,
    )


# ── Request models ───────────────────────────────────────────────────

class CreateSessionRequest(BaseModel):
    language: Language = Language.EN


class LanguageRequest(BaseModel):
    language: Language


class ImageUploadRequest(BaseModel):
    """Base64 image from the drop zone: data:image/png;base64,... or raw base64."""
    data: str
    mime_type: Optional[str] = None
    filename: Optional[str] = None


class PresetRequest(BaseModel):
    field: OptionField
    value: str


class CustomRequest(BaseModel):
    field: OptionField
    text: str = ""


class ModeRequest(BaseModel):
    manual: bool


class ViralRequest(BaseModel):
    enabled: bool


class PromptRequest(BaseModel):
    text: str = ""


class GenerateRequest(BaseModel):
    quality: Quality = Quality.STANDARD


class CaptionRequest(BaseModel):
    strategy: CaptionStrategy


# ── Lifecycle ────────────────────────────────────────────────────────

@sessions_router.post("", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: Optional[CreateSessionRequest] = None,
    controller: StudioController = Depends(get_controller),
):
    language = request.language if request else Language.EN
    return _view(controller.create(language))


@sessions_router.get("/{session_id}", response_model=SessionView)
async def get_session(session_id: str, controller: StudioController = Depends(get_controller)):
    return _view(controller.get(session_id))


@sessions_router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, controller: StudioController = Depends(get_controller)):
    controller.remove(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@sessions_router.put("/{session_id}/language", response_model=SessionView)
async def set_language(
    session_id: str,
    request: LanguageRequest,
    controller: StudioController = Depends(get_controller),
):
    return _view(controller.set_language(session_id, request.language))


@sessions_router.post("/{session_id}/reset", response_model=SessionView)
async def reset_session(session_id: str, controller: StudioController = Depends(get_controller)):
    return _view(controller.reset(session_id))


# ── Upload ───────────────────────────────────────────────────────────

@sessions_router.post("/{session_id}/image", response_model=SessionView)
async def upload_image(
    session_id: str,
    request: ImageUploadRequest,
    controller: StudioController = Depends(get_controller),
):
    """
    Upload the reference photo and analyze it.

    A non-image payload leaves the session in the upload phase with `error` set.
    """
    session = await controller.upload_base64(
        session_id, request.data, mime_type=request.mime_type, filename=request.filename,
    )
    return _view(session)


@sessions_router.post("/{session_id}/image/file", response_model=SessionView)
async def upload_image_file(
    session_id: str,
    file: UploadFile = File(..., description="Reference photo"),
    controller: StudioController = Depends(get_controller),
):
    # One byte past the limit is enough for the size check to reject it.
    raw = await file.read(controller.max_upload_bytes + 1)
    logger.info("Upload (multipart): %s (%d bytes read, %s)", file.filename, len(raw), file.content_type)
    session = await controller.upload_bytes(
        session_id, raw, mime_type=file.content_type, filename=file.filename,
    )
    return _view(session)


# ── Options ──────────────────────────────────────────────────────────

@sessions_router.post("/{session_id}/options/preset", response_model=SessionView)
async def select_preset(
    session_id: str,
    request: PresetRequest,
    controller: StudioController = Depends(get_controller),
):
    return _view(controller.select_preset(session_id, request.field, request.value))


@sessions_router.post("/{session_id}/options/custom", response_model=SessionView)
async def set_custom(
    session_id: str,
    request: CustomRequest,
    controller: StudioController = Depends(get_controller),
):
    return _view(controller.set_custom(session_id, request.field, request.text))


@sessions_router.post("/{session_id}/options/mode", response_model=SessionView)
async def set_mode(
    session_id: str,
    request: ModeRequest,
    controller: StudioController = Depends(get_controller),
):
    return _view(controller.set_manual_mode(session_id, request.manual))


@sessions_router.post("/{session_id}/options/viral", response_model=SessionView)
async def set_viral(
    session_id: str,
    request: ViralRequest,
    controller: StudioController = Depends(get_controller),
):
    return _view(controller.set_viral(session_id, request.enabled))


@sessions_router.post("/{session_id}/options/prompt", response_model=SessionView)
async def set_prompt(
    session_id: str,
    request: PromptRequest,
    controller: StudioController = Depends(get_controller),
):
    return _view(controller.set_custom_prompt(session_id, request.text))


# ── Generate / adjust / caption ──────────────────────────────────────

@sessions_router.post("/{session_id}/generate", response_model=SessionView)
async def generate(
    session_id: str,
    request: Optional[GenerateRequest] = None,
    controller: StudioController = Depends(get_controller),
):
    """Render the image. Ignored (state unchanged) until the options are ready."""
    quality = request.quality if request else Quality.STANDARD
    return _view(await controller.generate(session_id, quality))


@sessions_router.post("/{session_id}/adjust", response_model=SessionView)
async def adjust(session_id: str, controller: StudioController = Depends(get_controller)):
    return _view(controller.adjust(session_id))


@sessions_router.post(
    "/{session_id}/caption",
    response_model=SessionView,
    dependencies=[Depends(require_captions)],
)
async def caption(
    session_id: str,
    request: CaptionRequest,
    controller: StudioController = Depends(get_controller),
):
    return _view(await controller.generate_caption(session_id, request.strategy))
