"""
Tests for the Gemini adapter against a fake google-genai client.

Covers the two failure policies: advisory calls (analysis, captions) fall
back to fixed defaults, rendering raises SynthesisError.
"""

import base64
import json
from types import SimpleNamespace

import pytest

from snapstyle.core.config import get_settings
from snapstyle.core.locales import Language
from snapstyle.models.options import CaptionStrategy, OptionSelection, Quality
from snapstyle.services import gemini as gemini_service
from snapstyle.services.gemini import (
    SynthesisError,
    is_credential_error,
    parse_json_response,
)
from snapstyle.services.prompts import FALLBACK_POST, FALLBACK_SUGGESTIONS, MANDATORY_HASHTAGS


class FakeAPIError(Exception):
    def __init__(self, code, message):
        super().__init__(message)
        self.code = code


def _analysis_json(**overrides):
    data = {
        "originalDescription": "A man in a suit.",
        "expressions": ["Smug", "Shy", "Angry", "Bored", "Elated"],
        "clothing": ["Tux", "Hoodie", "Armor", "Robe", "Kilt"],
        "scenes": ["Casino", "Desert", "Forest", "Office", "Moon"],
        "styles": ["Noir", "Pixel Art", "Oil", "Claymation", "Comic"],
    }
    data.update(overrides)
    return json.dumps(data)


class TestAnalyze:

    @pytest.mark.asyncio
    async def test_valid_response(self, fake_client, png_payload):
        fake_client.models.response = SimpleNamespace(text=_analysis_json())

        result = await gemini_service.analyze_image(png_payload)

        assert result.original_description == "A man in a suit."
        assert result.styles[1] == "Pixel Art"
        call = fake_client.models.calls[0]
        assert call["model"] == get_settings().analysis_model
        assert call["config"].response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_fenced_json_is_accepted(self, fake_client, png_payload):
        fake_client.models.response = SimpleNamespace(text=f"```json\n{_analysis_json()}\n```")
        result = await gemini_service.analyze_image(png_payload)
        assert result.scenes[0] == "Casino"

    @pytest.mark.asyncio
    async def test_wrong_list_length_falls_back(self, fake_client, png_payload):
        fake_client.models.response = SimpleNamespace(text=_analysis_json(scenes=["One", "Two"]))
        assert await gemini_service.analyze_image(png_payload) == FALLBACK_SUGGESTIONS

    @pytest.mark.asyncio
    async def test_missing_field_falls_back(self, fake_client, png_payload):
        fake_client.models.response = SimpleNamespace(text=json.dumps({"expressions": []}))
        assert await gemini_service.analyze_image(png_payload) == FALLBACK_SUGGESTIONS

    @pytest.mark.asyncio
    async def test_empty_text_falls_back(self, fake_client, png_payload):
        fake_client.models.response = SimpleNamespace(text=None)
        assert await gemini_service.analyze_image(png_payload) == FALLBACK_SUGGESTIONS

    @pytest.mark.asyncio
    async def test_transport_error_falls_back(self, fake_client, png_payload):
        fake_client.models.error = ConnectionError("network unreachable")
        result = await gemini_service.analyze_image(png_payload)
        assert result == FALLBACK_SUGGESTIONS
        for labels in (result.expressions, result.clothing, result.scenes, result.styles):
            assert len(labels) == 5


class TestGenerateImage:

    @pytest.mark.asyncio
    async def test_standard_quality(self, fake_client, png_payload, suggestions, make_image_response):
        fake_client.models.response = make_image_response(data=b"abc", mime_type="image/webp")
        options = OptionSelection.seeded(suggestions)

        result = await gemini_service.generate_image(png_payload, options, Quality.STANDARD)

        assert result.image.mime_type == "image/webp"
        assert base64.b64decode(result.image.data) == b"abc"
        assert "Cinematic" in result.prompt
        call = fake_client.models.calls[0]
        assert call["model"] == get_settings().image_model_standard
        assert call["config"].image_config.aspect_ratio == "1:1"
        assert call["config"].image_config.image_size is None
        assert call["contents"][1] == result.prompt

    @pytest.mark.asyncio
    async def test_high_quality(self, fake_client, png_payload, suggestions, make_image_response):
        fake_client.models.response = make_image_response()

        await gemini_service.generate_image(png_payload, OptionSelection.seeded(suggestions), Quality.HIGH)

        call = fake_client.models.calls[0]
        assert call["model"] == get_settings().image_model_high
        assert call["config"].image_config.aspect_ratio == "1:1"
        assert call["config"].image_config.image_size == get_settings().high_quality_image_size

    @pytest.mark.asyncio
    async def test_missing_mime_type_defaults_to_png(self, fake_client, png_payload, suggestions, make_image_response):
        fake_client.models.response = make_image_response(mime_type=None)
        result = await gemini_service.generate_image(png_payload, OptionSelection.seeded(suggestions))
        assert result.image.mime_type == "image/png"
        assert result.image.data_url.startswith("data:image/png;base64,")

    @pytest.mark.asyncio
    async def test_no_image_part_raises(self, fake_client, png_payload, suggestions):
        fake_client.models.response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(
            parts=[SimpleNamespace(text="I can't do that", inline_data=None)],
        ))])
        with pytest.raises(SynthesisError) as exc_info:
            await gemini_service.generate_image(png_payload, OptionSelection.seeded(suggestions))
        assert not exc_info.value.credential

    @pytest.mark.asyncio
    async def test_no_candidates_raises(self, fake_client, png_payload, suggestions):
        fake_client.models.response = SimpleNamespace(candidates=None)
        with pytest.raises(SynthesisError):
            await gemini_service.generate_image(png_payload, OptionSelection.seeded(suggestions))

    @pytest.mark.asyncio
    async def test_credential_failure_is_classified(self, fake_client, png_payload, suggestions):
        fake_client.models.error = FakeAPIError(400, "API key not valid. Please pass a valid API key.")
        with pytest.raises(SynthesisError) as exc_info:
            await gemini_service.generate_image(png_payload, OptionSelection.seeded(suggestions), Quality.HIGH)
        assert exc_info.value.credential

    @pytest.mark.asyncio
    async def test_generic_failure_is_not_credential(self, fake_client, png_payload, suggestions):
        fake_client.models.error = FakeAPIError(503, "The model is overloaded.")
        with pytest.raises(SynthesisError) as exc_info:
            await gemini_service.generate_image(png_payload, OptionSelection.seeded(suggestions))
        assert not exc_info.value.credential


class TestGenerateCaption:

    @pytest.mark.asyncio
    async def test_valid_response_gets_mandatory_tags(self, fake_client, suggestions):
        fake_client.models.response = SimpleNamespace(text=json.dumps({
            "headline": "RAHSIA TERBONGKAR!",
            "content": "Jom cuba!",
            "hashtags": ["#AI"],
        }))

        post = await gemini_service.generate_caption(
            OptionSelection.seeded(suggestions), Language.EN, CaptionStrategy.REACTION_HOOK,
        )

        assert post.headline == "RAHSIA TERBONGKAR!"
        for tag in MANDATORY_HASHTAGS:
            assert tag in post.hashtags
        call = fake_client.models.calls[0]
        assert call["model"] == get_settings().caption_model
        assert "BAHASA MELAYU" in call["contents"]

    @pytest.mark.asyncio
    async def test_output_language_ignores_ui_language(self, fake_client, suggestions):
        fake_client.models.response = SimpleNamespace(text=json.dumps(
            {"headline": "h", "content": "c", "hashtags": []},
        ))
        options = OptionSelection.seeded(suggestions)

        await gemini_service.generate_caption(options, Language.EN, CaptionStrategy.MEME)
        await gemini_service.generate_caption(options, Language.MS, CaptionStrategy.MEME)

        first, second = fake_client.models.calls
        assert first["contents"] == second["contents"]

    @pytest.mark.asyncio
    async def test_identical_inputs_identical_posts(self, fake_client, suggestions):
        fake_client.models.response = SimpleNamespace(text=json.dumps(
            {"headline": "h", "content": "c", "hashtags": ["#fbpro"]},
        ))
        options = OptionSelection.seeded(suggestions)

        first = await gemini_service.generate_caption(options, Language.MS, CaptionStrategy.TUTORIAL)
        second = await gemini_service.generate_caption(options, Language.MS, CaptionStrategy.TUTORIAL)

        assert first == second

    @pytest.mark.asyncio
    async def test_failure_returns_fallback(self, fake_client, suggestions):
        fake_client.models.error = TimeoutError("deadline exceeded")
        post = await gemini_service.generate_caption(
            OptionSelection.seeded(suggestions), Language.EN, CaptionStrategy.CORPORATE_STATEMENT,
        )
        assert post == FALLBACK_POST

    @pytest.mark.asyncio
    async def test_schema_mismatch_returns_fallback(self, fake_client, suggestions):
        fake_client.models.response = SimpleNamespace(text=json.dumps({"headline": "only"}))
        post = await gemini_service.generate_caption(
            OptionSelection.seeded(suggestions), Language.EN, CaptionStrategy.SITUATIONAL_STORY,
        )
        assert post == FALLBACK_POST


class TestHelpers:

    def test_parse_json_with_surrounding_text(self):
        assert parse_json_response('Sure! {"headline": "x"} Hope it helps') == {"headline": "x"}

    def test_parse_json_garbage(self):
        assert parse_json_response("not json at all") is None

    @pytest.mark.parametrize("exc, expected", [
        (FakeAPIError(401, "unauthenticated"), True),
        (FakeAPIError(403, "permission denied"), True),
        (ValueError("GEMINI_API_KEY is required"), True),
        (RuntimeError("API key expired"), True),
        (FakeAPIError(500, "internal"), False),
        (RuntimeError("No image data found in response"), False),
    ])
    def test_is_credential_error(self, exc, expected):
        assert is_credential_error(exc) is expected

    def test_missing_key_raises(self, monkeypatch):
        monkeypatch.setattr(gemini_service, "_gemini_client", None)
        monkeypatch.setattr(get_settings(), "gemini_api_key", "")
        with pytest.raises(ValueError):
            gemini_service._get_gemini_client()

    def test_client_gets_request_timeout(self, monkeypatch):
        from google import genai

        created = {}

        class RecordingClient:
            def __init__(self, **kwargs):
                created.update(kwargs)

        monkeypatch.setattr(genai, "Client", RecordingClient)
        monkeypatch.setattr(gemini_service, "_gemini_client", None)
        monkeypatch.setattr(get_settings(), "gemini_api_key", "test-key")
        monkeypatch.setattr(get_settings(), "gemini_timeout_seconds", 30)

        client = gemini_service._get_gemini_client()

        assert isinstance(client, RecordingClient)
        assert created["api_key"] == "test-key"
        assert created["http_options"].timeout == 30_000

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self, fake_client, png_payload):
        fake_client.models.error = TimeoutError("Request timed out")
        assert await gemini_service.analyze_image(png_payload) == FALLBACK_SUGGESTIONS
