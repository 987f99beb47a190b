"""
Option model — the creative choices a user makes before rendering.

OptionSelection is an immutable value. Every mutation returns a new
selection, so the session can swap it in as part of a transition.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from ..core.locales import ACCESSORY_OPTIONS, COLOR_OPTIONS, Language, is_no_accessory_label
from .content import Suggestions


class OptionField(str, Enum):
    EXPRESSION = "expression"
    CLOTHING = "clothing"
    SCENE = "scene"
    STYLE = "style"
    ACCESSORY = "accessory"
    CLOTHING_COLOR = "clothing_color"


class Quality(str, Enum):
    STANDARD = "standard"
    HIGH = "high"


class CaptionStrategy(str, Enum):
    REACTION_HOOK = "reaction-hook"
    TUTORIAL = "tutorial"
    SITUATIONAL_STORY = "situational-story"
    CORPORATE_STATEMENT = "corporate-statement"
    MEME = "meme"


@dataclass(frozen=True)
class OptionSelection:
    """
    User-selected creative options.

    accessory=None means "no accessory". The locale labels for it
    ("None", "Tiada") are normalized to None on assignment.
    """

    expression: Optional[str] = None
    clothing: Optional[str] = None
    scene: Optional[str] = None
    style: Optional[str] = None
    accessory: Optional[str] = None
    clothing_color: Optional[str] = None
    viral: bool = False
    manual_mode: bool = False
    custom_prompt: str = ""
    custom_fields: frozenset[OptionField] = field(default_factory=frozenset)

    def __post_init__(self):
        if self.accessory is not None and is_no_accessory_label(self.accessory):
            object.__setattr__(self, "accessory", None)

    @classmethod
    def seeded(cls, suggestions: Suggestions) -> "OptionSelection":
        """Initial selection after analysis: first offered label per category."""
        return cls(
            expression=suggestions.expressions[0],
            clothing=suggestions.clothing[0],
            scene=suggestions.scenes[0],
            style=suggestions.styles[0],
        )

    # ── Reads ────────────────────────────────────────────────────────

    def get(self, option: OptionField) -> Optional[str]:
        return getattr(self, OptionField(option).value)

    def is_custom(self, option: OptionField) -> bool:
        return OptionField(option) in self.custom_fields

    @property
    def ready_for_synthesis(self) -> bool:
        if self.manual_mode:
            return bool(self.custom_prompt.strip())
        return self.style is not None and self.expression is not None

    # ── Mutations ────────────────────────────────────────────────────

    def select_preset(self, option: OptionField, value: str) -> "OptionSelection":
        """Pick an offered/fallback label and leave custom mode for that field."""
        option = OptionField(option)
        return replace(
            self,
            **{option.value: value},
            custom_fields=self.custom_fields - {option},
        )

    def set_custom(self, option: OptionField, text: str) -> "OptionSelection":
        """Activate the custom override for a field and set it from free text."""
        option = OptionField(option)
        return replace(
            self,
            **{option.value: text if text.strip() else None},
            custom_fields=self.custom_fields | {option},
        )

    def set_manual_mode(self, manual: bool) -> "OptionSelection":
        return replace(self, manual_mode=manual)

    def toggle_manual_mode(self) -> "OptionSelection":
        return self.set_manual_mode(not self.manual_mode)

    def set_viral(self, viral: bool) -> "OptionSelection":
        return replace(self, viral=viral)

    def set_custom_prompt(self, text: str) -> "OptionSelection":
        return replace(self, custom_prompt=text)


def offered_labels(
    option: OptionField,
    suggestions: Optional[Suggestions],
    language: Language,
) -> list[str]:
    """Labels the UI offers for a field before any custom override."""
    option = OptionField(option)
    language = Language(language)
    if option is OptionField.ACCESSORY:
        return list(ACCESSORY_OPTIONS[language])
    if option is OptionField.CLOTHING_COLOR:
        return list(COLOR_OPTIONS[language])
    if suggestions is None:
        return []
    return list({
        OptionField.EXPRESSION: suggestions.expressions,
        OptionField.CLOTHING: suggestions.clothing,
        OptionField.SCENE: suggestions.scenes,
        OptionField.STYLE: suggestions.styles,
    }[option])
