"""
Gemini adapter — analysis, image rendering and captions.

Async wrappers around the sync google-genai SDK (run in a worker thread).

  analyze_image     advisory: any failure → FALLBACK_SUGGESTIONS
  generate_image    primary:  any failure → SynthesisError
  generate_caption  advisory: any failure → FALLBACK_POST

No retries. Callers re-invoke if they want another attempt.
"""

import asyncio
import base64
import json
import logging
import re
import time
from typing import Optional

from ..core.config import get_settings
from ..core.locales import Language
from ..models.content import GeneratedImage, ImagePayload, SocialPost, Suggestions
from ..models.options import CaptionStrategy, OptionSelection, Quality
from .prompts import (
    ANALYSIS_INSTRUCTION,
    FALLBACK_POST,
    FALLBACK_SUGGESTIONS,
    analysis_schema,
    build_caption_prompt,
    build_image_prompt,
    caption_schema,
    with_mandatory_hashtags,
)

logger = logging.getLogger(__name__)

ASPECT_RATIO = "1:1"
DEFAULT_IMAGE_MIME = "image/png"

_gemini_client = None


class SynthesisError(Exception):
    """Image rendering failed. `credential` is True for missing/invalid API keys."""

    def __init__(self, message: str, credential: bool = False):
        super().__init__(message)
        self.credential = credential


def _get_gemini_client():
    """Lazy-load and cache the google-genai client as a singleton."""
    global _gemini_client
    if _gemini_client is not None:
        return _gemini_client
    from google import genai
    from google.genai import types

    settings = get_settings()
    if not settings.gemini_api_key:
        raise ValueError("GEMINI_API_KEY is required for image analysis and generation")
    _gemini_client = genai.Client(
        api_key=settings.gemini_api_key,
        # HttpOptions.timeout is in milliseconds
        http_options=types.HttpOptions(timeout=int(settings.gemini_timeout_seconds * 1000)),
    )
    return _gemini_client


def reset_client() -> None:
    """Drop the cached client (e.g. after the API key changed)."""
    global _gemini_client
    _gemini_client = None


def is_credential_error(exc: BaseException) -> bool:
    """Classify a failure as a missing/invalid credential."""
    if getattr(exc, "code", None) in (401, 403):
        return True
    text = str(exc).lower()
    return "api key" in text or "api_key" in text


def parse_json_response(text: str) -> Optional[dict]:
    """Parse JSON from a model response, handling markdown code fences."""
    text = re.sub(r"```json\s*", "", text)
    text = re.sub(r"```\s*", "", text)
    text = text.strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        match = re.search(r"\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}", text, re.DOTALL)
        if match:
            try:
                return json.loads(match.group())
            except json.JSONDecodeError:
                pass
    return None


def _image_part(image: ImagePayload):
    from google.genai import types

    return types.Part.from_bytes(data=image.to_bytes(), mime_type=image.mime_type)


# ── Sync functions (run in a thread) ─────────────────────────────────


def _sync_analyze(image: ImagePayload) -> Suggestions:
    from google.genai import types

    client = _get_gemini_client()
    response = client.models.generate_content(
        model=get_settings().analysis_model,
        contents=[_image_part(image), ANALYSIS_INSTRUCTION],
        config=types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=analysis_schema(),
        ),
    )

    text = response.text
    if not text:
        raise ValueError("No response from analysis model")
    data = parse_json_response(text)
    if data is None:
        raise ValueError("Analysis response is not JSON")
    return Suggestions.model_validate(data)


def _image_config(quality: Quality):
    from google.genai import types

    if quality is Quality.HIGH:
        return types.ImageConfig(
            aspect_ratio=ASPECT_RATIO,
            image_size=get_settings().high_quality_image_size,
        )
    return types.ImageConfig(aspect_ratio=ASPECT_RATIO)


def _model_for(quality: Quality) -> str:
    settings = get_settings()
    if quality is Quality.HIGH:
        return settings.image_model_high
    return settings.image_model_standard


def _sync_generate_image(image: ImagePayload, prompt: str, quality: Quality) -> ImagePayload:
    from google.genai import types

    client = _get_gemini_client()
    response = client.models.generate_content(
        model=_model_for(quality),
        contents=[_image_part(image), prompt],
        config=types.GenerateContentConfig(
            response_modalities=["TEXT", "IMAGE"],
            image_config=_image_config(quality),
        ),
    )

    candidates = response.candidates or []
    content = candidates[0].content if candidates else None
    parts = (content.parts if content else None) or []
    if not parts:
        raise RuntimeError("No content generated")

    for part in parts:
        inline = part.inline_data
        if inline is None or not inline.data:
            continue
        mime_type = inline.mime_type or DEFAULT_IMAGE_MIME
        if isinstance(inline.data, str):
            return ImagePayload(data=inline.data, mime_type=mime_type)
        return ImagePayload(data=base64.b64encode(inline.data).decode("ascii"), mime_type=mime_type)

    raise RuntimeError("No image data found in response")


def _sync_generate_caption(prompt: str) -> SocialPost:
    from google.genai import types

    client = _get_gemini_client()
    response = client.models.generate_content(
        model=get_settings().caption_model,
        contents=prompt,
        config=types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=caption_schema(),
        ),
    )

    text = response.text
    if not text:
        raise ValueError("No response from text generation model")
    data = parse_json_response(text)
    if data is None:
        raise ValueError("Caption response is not JSON")
    return SocialPost.model_validate(data)


# ── Async public API ─────────────────────────────────────────────────


async def analyze_image(image: ImagePayload) -> Suggestions:
    """Describe the subject and propose 5 options per category. Never raises."""
    start = time.monotonic()
    try:
        suggestions = await asyncio.to_thread(_sync_analyze, image)
    except Exception as e:
        logger.warning("Analysis failed after %.1fs: %s — using defaults", time.monotonic() - start, e)
        return FALLBACK_SUGGESTIONS

    logger.info("Analysis: %dms | model=%s", int((time.monotonic() - start) * 1000),
                get_settings().analysis_model)
    return suggestions


async def generate_image(
    image: ImagePayload,
    options: OptionSelection,
    quality: Quality = Quality.STANDARD,
) -> GeneratedImage:
    """Render the reference image with the selected options. Raises SynthesisError."""
    quality = Quality(quality)
    prompt = build_image_prompt(options)
    start = time.monotonic()

    try:
        rendered = await asyncio.to_thread(_sync_generate_image, image, prompt, quality)
    except Exception as e:
        credential = is_credential_error(e)
        logger.error(
            "Generation failed after %.1fs (quality=%s, credential=%s): %s",
            time.monotonic() - start, quality.value, credential, e,
        )
        raise SynthesisError(str(e), credential=credential) from e

    logger.info(
        "Generation: %dms | model=%s | quality=%s | mode=%s",
        int((time.monotonic() - start) * 1000), _model_for(quality), quality.value,
        "manual" if options.manual_mode else "guided",
    )
    return GeneratedImage(image=rendered, prompt=prompt)


async def generate_caption(
    options: OptionSelection,
    language: Language,
    strategy: CaptionStrategy,
) -> SocialPost:
    """
    Write a social post for the rendered image. Never raises.

    `language` is the UI language and does not change the output: captions
    are always written in Malay.
    """
    strategy = CaptionStrategy(strategy)
    prompt = build_caption_prompt(options, strategy)
    start = time.monotonic()

    try:
        post = await asyncio.to_thread(_sync_generate_caption, prompt)
    except Exception as e:
        logger.warning("Caption generation failed (%s): %s — using default post", strategy.value, e)
        return FALLBACK_POST

    logger.info("Caption: %dms | strategy=%s | ui_language=%s",
                int((time.monotonic() - start) * 1000), strategy.value, Language(language).value)
    return with_mandatory_hashtags(post)
