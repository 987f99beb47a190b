"""
Shared fixtures: sample payloads, a stub adapter, a fake Gemini client.
"""

import base64
from types import SimpleNamespace

import pytest

from snapstyle.models.content import GeneratedImage, ImagePayload, SocialPost, Suggestions
from snapstyle.orchestrator.controller import StudioController
from snapstyle.services import gemini as gemini_service
from snapstyle.services.session_store import SessionStore

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def png_b64():
    return base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def png_payload():
    return ImagePayload.from_bytes(PNG_BYTES, "image/png")


@pytest.fixture
def suggestions():
    return Suggestions(
        original_description="A woman smiling in a garden.",
        expressions=["Joyful", "Pensive", "Fierce", "Playful", "Calm"],
        clothing=["Kebaya", "Denim Jacket", "Ball Gown", "Streetwear", "Blazer"],
        scenes=["Rooftop Garden", "Night Market", "Beach", "Library", "Studio"],
        styles=["Cinematic", "Watercolor", "Anime", "Pop Art", "Film Noir"],
    )


class StubAdapter:
    """Deterministic stand-in for services.gemini. Records every call."""

    def __init__(self, suggestions, post=None):
        self.suggestions = suggestions
        self.post = post or SocialPost(
            headline="TAK SANGKA!",
            content="Gambar ini dijana dengan AI.",
            hashtags=["#wanysaEdutech", "#fbpro", "#tipsfbpro"],
        )
        self.analyze_error = None
        self.generate_error = None
        self.calls = []

    async def analyze_image(self, image):
        self.calls.append(("analyze", image))
        if self.analyze_error:
            raise self.analyze_error
        return self.suggestions

    async def generate_image(self, image, options, quality):
        self.calls.append(("generate", options, quality))
        if self.generate_error:
            raise self.generate_error
        return GeneratedImage(
            image=ImagePayload(data="cmVuZGVyZWQ=", mime_type="image/png"),
            prompt=f"prompt for {options.style}",
        )

    async def generate_caption(self, options, language, strategy):
        self.calls.append(("caption", options, language, strategy))
        return self.post


class RecordingCredentials:
    def __init__(self, has_key=False, error=None):
        self.has_key = has_key
        self.error = error
        self.prompted = 0
        self.checked = 0

    async def has_credential(self):
        self.checked += 1
        if self.error:
            raise self.error
        return self.has_key

    async def prompt_for_credential(self):
        self.prompted += 1


@pytest.fixture
def adapter(suggestions):
    return StubAdapter(suggestions)


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def controller(store, adapter):
    return StudioController(store=store, adapter=adapter)


# ── Fake google-genai client ─────────────────────────────────────────

class FakeModels:
    def __init__(self):
        self.response = None
        self.error = None
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.response


class FakeGeminiClient:
    def __init__(self):
        self.models = FakeModels()


def image_response(data=b"rendered-bytes", mime_type="image/png"):
    """Shape of a google-genai response carrying one text part and one image part."""
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[
        SimpleNamespace(text="Here is your image", inline_data=None),
        SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type)),
    ]))])


@pytest.fixture
def fake_client(monkeypatch):
    client = FakeGeminiClient()
    monkeypatch.setattr(gemini_service, "_gemini_client", client)
    return client


@pytest.fixture
def make_image_response():
    return image_response


@pytest.fixture
def make_credentials():
    return RecordingCredentials
