"""
Session state machine.

One Session per user interaction. Sessions are immutable: every transition
returns a new Session, and construction checks the phase invariants.

  UPLOAD → ANALYZING → OPTION_SELECTION → GENERATING → RESULT
                ↓                              ↓          ↓
              UPLOAD                  OPTION_SELECTION  OPTION_SELECTION (adjust)

Any phase → UPLOAD via reset().
"""

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from ..core.locales import Language
from .content import GeneratedImage, ImagePayload, SocialPost, Suggestions
from .options import CaptionStrategy, OptionSelection


class Phase(str, Enum):
    UPLOAD = "upload"
    ANALYZING = "analyzing"
    OPTION_SELECTION = "option_selection"
    GENERATING = "generating"
    RESULT = "result"


_NEEDS_SUGGESTIONS = {Phase.OPTION_SELECTION, Phase.GENERATING, Phase.RESULT}


class InvalidTransition(Exception):
    """Raised when an action is not allowed in the session's current phase."""

    def __init__(self, action: str, phase: Phase):
        super().__init__(f"Cannot {action} while session is in phase '{phase.value}'")
        self.action = action
        self.phase = phase


def new_session_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Session:
    session_id: str = field(default_factory=new_session_id)
    language: Language = Language.EN
    phase: Phase = Phase.UPLOAD
    reference_image: Optional[ImagePayload] = None
    suggestions: Optional[Suggestions] = None
    options: OptionSelection = field(default_factory=OptionSelection)
    generated_image: Optional[GeneratedImage] = None
    social_post: Optional[SocialPost] = None
    caption_strategy: Optional[CaptionStrategy] = None
    error: Optional[str] = None

    def __post_init__(self):
        if self.phase in _NEEDS_SUGGESTIONS and self.suggestions is None:
            raise ValueError(f"Session in phase '{self.phase.value}' has no suggestions")
        if self.phase is Phase.RESULT and self.generated_image is None:
            raise ValueError("Session in phase 'result' has no generated image")
        if self.phase is not Phase.UPLOAD and self.reference_image is None:
            raise ValueError(f"Session in phase '{self.phase.value}' has no reference image")

    def _require(self, action: str, *phases: Phase) -> None:
        if self.phase not in phases:
            raise InvalidTransition(action, self.phase)

    # ── Upload / analysis ────────────────────────────────────────────

    def with_error(self, error: Optional[str]) -> "Session":
        return replace(self, error=error)

    def with_language(self, language: Language) -> "Session":
        return replace(self, language=Language(language))

    def start_analysis(self, image: ImagePayload) -> "Session":
        self._require("upload an image", Phase.UPLOAD)
        return replace(self, phase=Phase.ANALYZING, reference_image=image, error=None)

    def finish_analysis(self, suggestions: Suggestions) -> "Session":
        self._require("finish analysis", Phase.ANALYZING)
        return replace(
            self,
            phase=Phase.OPTION_SELECTION,
            suggestions=suggestions,
            options=OptionSelection.seeded(suggestions),
        )

    def fail_analysis(self, error: str) -> "Session":
        self._require("fail analysis", Phase.ANALYZING)
        return replace(
            self,
            phase=Phase.UPLOAD,
            reference_image=None,
            suggestions=None,
            error=error,
        )

    # ── Options ──────────────────────────────────────────────────────

    def with_options(self, options: OptionSelection) -> "Session":
        self._require("change options", Phase.OPTION_SELECTION)
        return replace(self, options=options)

    # ── Image synthesis ──────────────────────────────────────────────

    def start_generation(self) -> "Session":
        self._require("generate", Phase.OPTION_SELECTION)
        return replace(
            self,
            phase=Phase.GENERATING,
            error=None,
            social_post=None,
            caption_strategy=None,
        )

    def finish_generation(self, image: GeneratedImage) -> "Session":
        self._require("finish generation", Phase.GENERATING)
        return replace(
            self,
            phase=Phase.RESULT,
            generated_image=image,
            social_post=None,
            caption_strategy=None,
        )

    def fail_generation(self, error: str) -> "Session":
        self._require("fail generation", Phase.GENERATING)
        return replace(self, phase=Phase.OPTION_SELECTION, error=error)

    def adjust(self) -> "Session":
        """Back to option selection from a result, dropping the stale caption."""
        self._require("adjust settings", Phase.RESULT)
        return replace(
            self,
            phase=Phase.OPTION_SELECTION,
            social_post=None,
            caption_strategy=None,
        )

    # ── Captions (side channel, phase stays RESULT) ──────────────────

    def start_caption(self, strategy: CaptionStrategy) -> "Session":
        self._require("write a caption", Phase.RESULT)
        return replace(
            self,
            caption_strategy=CaptionStrategy(strategy),
            social_post=None,
            error=None,
        )

    def finish_caption(self, post: SocialPost) -> "Session":
        self._require("finish caption", Phase.RESULT)
        return replace(self, social_post=post)

    # ── Reset ────────────────────────────────────────────────────────

    def reset(self) -> "Session":
        return Session(session_id=self.session_id, language=self.language)
