"""
Studio controller — drives a Session through its phases.

Every user action maps to one method. Each method reads the current Session
from the store, applies transitions, awaits the adapter where needed, and
writes the new Session back. Remote calls are awaited serially; while one is
in flight the store already holds the intermediate phase (ANALYZING,
GENERATING), so polling clients see it.

A result that arrives after the session moved on (reset, adjust, a newer
upload) is dropped instead of overwriting the newer state.
"""

import logging
from typing import Callable, Optional

from ..core.locales import Language, message
from ..models.content import ImagePayload
from ..models.options import CaptionStrategy, OptionField, OptionSelection, Quality
from ..models.session import InvalidTransition, Phase, Session
from ..services import gemini as gemini_service
from ..services.credentials import CredentialProvider, ensure_credential
from ..services.encoding import InvalidImage, payload_from_base64, payload_from_bytes, resolve_mime_type
from ..services.gemini import SynthesisError, is_credential_error
from ..services.session_store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024


class StudioController:
    """
    Args:
        store:        Session registry.
        adapter:      Object exposing analyze_image / generate_image /
                      generate_caption coroutines (default: services.gemini).
        credentials:  Optional credential provider consulted before
                      high-quality renders.
        allow_high_quality: When False, HIGH requests render as STANDARD.
        max_upload_bytes:   Upload size limit.
    """

    def __init__(
        self,
        store: SessionStore,
        adapter=None,
        credentials: Optional[CredentialProvider] = None,
        allow_high_quality: bool = True,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self.store = store
        self.adapter = adapter or gemini_service
        self.credentials = credentials
        self.allow_high_quality = allow_high_quality
        self.max_upload_bytes = max_upload_bytes

    # ── Lifecycle ────────────────────────────────────────────────

    def create(self, language: Language = Language.EN) -> Session:
        session = self.store.put(Session(language=Language(language)))
        logger.info("Created session %s (language=%s)", session.session_id, session.language.value)
        return session

    def get(self, session_id: str) -> Session:
        return self.store.get(session_id)

    def set_language(self, session_id: str, language: Language) -> Session:
        return self.store.put(self.store.get(session_id).with_language(language))

    def reset(self, session_id: str) -> Session:
        session = self.store.get(session_id)
        logger.info("Reset session %s from phase %s", session_id, session.phase.value)
        return self.store.put(session.reset())

    def remove(self, session_id: str) -> None:
        self.store.get(session_id)
        self.store.remove(session_id)

    # ── Upload + analysis ────────────────────────────────────────

    async def upload_base64(
        self,
        session_id: str,
        data: str,
        mime_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> Session:
        """Upload from the drop zone / file picker as base64 or a data URL."""
        return await self._upload(
            session_id,
            lambda: payload_from_base64(data, mime_type, filename, self.max_upload_bytes),
        )

    async def upload_bytes(
        self,
        session_id: str,
        raw: bytes,
        mime_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> Session:
        """Upload from a multipart form (file picker or camera capture)."""
        return await self._upload(
            session_id,
            lambda: payload_from_bytes(
                raw, resolve_mime_type(mime_type, filename), self.max_upload_bytes,
            ),
        )

    async def _upload(self, session_id: str, decode: Callable[[], ImagePayload]) -> Session:
        session = self.store.get(session_id)
        if session.phase is not Phase.UPLOAD:
            raise InvalidTransition("upload an image", session.phase)

        try:
            payload = decode()
        except InvalidImage as e:
            logger.info("Rejected upload for session %s: %s", session_id, e)
            return self.store.put(session.with_error(message(session.language, e.reason)))

        session = self.store.put(session.start_analysis(payload))

        try:
            suggestions = await self.adapter.analyze_image(payload)
        except Exception as e:
            logger.error("Analysis failed for session %s: %s", session_id, e)
            error = message(session.language, "analysis_failed")
            return self._commit(
                session_id,
                lambda s: s.phase is Phase.ANALYZING and s.reference_image == payload,
                lambda s: s.fail_analysis(error),
            )

        return self._commit(
            session_id,
            lambda s: s.phase is Phase.ANALYZING and s.reference_image == payload,
            lambda s: s.finish_analysis(suggestions),
        )

    # ── Options ──────────────────────────────────────────────────

    def select_preset(self, session_id: str, option: OptionField, value: str) -> Session:
        return self._update_options(session_id, lambda o: o.select_preset(option, value))

    def set_custom(self, session_id: str, option: OptionField, text: str) -> Session:
        return self._update_options(session_id, lambda o: o.set_custom(option, text))

    def set_manual_mode(self, session_id: str, manual: bool) -> Session:
        return self._update_options(session_id, lambda o: o.set_manual_mode(manual))

    def toggle_manual_mode(self, session_id: str) -> Session:
        return self._update_options(session_id, lambda o: o.toggle_manual_mode())

    def set_viral(self, session_id: str, viral: bool) -> Session:
        return self._update_options(session_id, lambda o: o.set_viral(viral))

    def set_custom_prompt(self, session_id: str, text: str) -> Session:
        return self._update_options(session_id, lambda o: o.set_custom_prompt(text))

    def _update_options(
        self,
        session_id: str,
        change: Callable[[OptionSelection], OptionSelection],
    ) -> Session:
        session = self.store.get(session_id)
        return self.store.put(session.with_options(change(session.options)))

    # ── Image synthesis ──────────────────────────────────────────

    async def generate(self, session_id: str, quality: Quality = Quality.STANDARD) -> Session:
        """Render the image. A no-op while the options are not ready."""
        session = self.store.get(session_id)
        if session.phase is not Phase.OPTION_SELECTION:
            raise InvalidTransition("generate", session.phase)
        if not session.options.ready_for_synthesis:
            logger.info("Generate ignored for session %s: options not ready", session_id)
            return session

        quality = Quality(quality)
        if quality is Quality.HIGH and not self.allow_high_quality:
            logger.info("High quality disabled; rendering session %s as standard", session_id)
            quality = Quality.STANDARD
        if quality is Quality.HIGH:
            await ensure_credential(self.credentials)
            session = self.store.get(session_id)
            if session.phase is not Phase.OPTION_SELECTION or not session.options.ready_for_synthesis:
                logger.info("Generate dropped for session %s: state changed during credential check "
                            "(phase=%s)", session_id, session.phase.value)
                return session

        session = self.store.put(session.start_generation())
        reference = session.reference_image

        try:
            image = await self.adapter.generate_image(reference, session.options, quality)
        except Exception as e:
            credential = e.credential if isinstance(e, SynthesisError) else is_credential_error(e)
            logger.error("Generation failed for session %s (credential=%s): %s",
                         session_id, credential, e)
            error = message(session.language, "credential_failed" if credential else "generation_failed")
            return self._commit(
                session_id,
                lambda s: s.phase is Phase.GENERATING and s.reference_image == reference,
                lambda s: s.fail_generation(error),
            )

        return self._commit(
            session_id,
            lambda s: s.phase is Phase.GENERATING and s.reference_image == reference,
            lambda s: s.finish_generation(image),
        )

    def adjust(self, session_id: str) -> Session:
        return self.store.put(self.store.get(session_id).adjust())

    # ── Captions ─────────────────────────────────────────────────

    async def generate_caption(self, session_id: str, strategy: CaptionStrategy) -> Session:
        """Write a caption for the current result. Phase stays RESULT."""
        session = self.store.put(self.store.get(session_id).start_caption(strategy))
        rendered = session.generated_image

        post = await self.adapter.generate_caption(session.options, session.language, strategy)

        return self._commit(
            session_id,
            lambda s: s.phase is Phase.RESULT and s.generated_image == rendered,
            lambda s: s.finish_caption(post),
        )

    # ── Helpers ──────────────────────────────────────────────────

    def _commit(
        self,
        session_id: str,
        still_current: Callable[[Session], bool],
        transition: Callable[[Session], Session],
    ) -> Session:
        """Apply a late transition only if the session has not moved on."""
        current = self.store.get(session_id)
        if not still_current(current):
            logger.info("Dropping stale result for session %s (phase=%s)",
                        session_id, current.phase.value)
            return current
        return self.store.put(transition(current))
