"""
Static locale tables: fixed option lists and user-facing messages.

Only display text lives here. Prompt text sent to Gemini is English
regardless of the UI language (captions are always written in Malay, see
services/prompts.py).
"""

from enum import Enum


class Language(str, Enum):
    EN = "en"
    MS = "ms"


# ── Fixed option lists ───────────────────────────────────────────────
# First entry of ACCESSORY_OPTIONS is the "no accessory" label.

ACCESSORY_OPTIONS: dict[Language, list[str]] = {
    Language.EN: ["None", "Bawal", "Shawl", "Sarung", "Turban", "Instant"],
    Language.MS: ["Tiada", "Bawal", "Shawl", "Sarung", "Turban", "Instant"],
}

COLOR_OPTIONS: dict[Language, list[str]] = {
    Language.EN: ["Black", "White", "Red", "Blue", "Gold", "Pastel", "Neon"],
    Language.MS: ["Hitam", "Putih", "Merah", "Biru", "Emas", "Pastel", "Neon"],
}

# Every locale's "no accessory" label, normalized to lower case.
NO_ACCESSORY_LABELS = frozenset(
    options[0].lower() for options in ACCESSORY_OPTIONS.values()
)


def is_no_accessory_label(value: str) -> bool:
    """True when value is the "no accessory" label of any locale."""
    return value.strip().lower() in NO_ACCESSORY_LABELS


# ── Messages ─────────────────────────────────────────────────────────

MESSAGES: dict[Language, dict[str, str]] = {
    Language.EN: {
        "invalid_image": "Please drop a valid image file.",
        "analysis_failed": "Failed to analyze image. Please try another photo.",
        "generation_failed": (
            "Failed to generate image. The model might be busy or the request was blocked."
        ),
        "credential_failed": (
            "Invalid API Key. High Quality mode requires a valid API key "
            "linked to a billing project."
        ),
        "image_too_large": "The image is too large. Please upload a smaller photo.",
    },
    Language.MS: {
        "invalid_image": "Sila masukkan fail imej yang sah.",
        "analysis_failed": "Gagal menganalisis imej. Sila cuba foto lain.",
        "generation_failed": (
            "Gagal menjana imej. Model mungkin sibuk atau permintaan telah disekat."
        ),
        "credential_failed": (
            "Kunci API tidak sah. Mod Kualiti Tinggi memerlukan kunci API "
            "yang dipautkan kepada projek berbayar."
        ),
        "image_too_large": "Imej terlalu besar. Sila muat naik foto yang lebih kecil.",
    },
}


def message(language: Language, key: str) -> str:
    return MESSAGES[Language(language)][key]
