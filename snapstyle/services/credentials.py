"""
Credential capability — "is a paid key selected?" and "ask for one".

The controller receives a provider explicitly. The check is advisory:
ensure_credential() never raises, and rendering is attempted regardless.
"""

import logging
from typing import Optional, Protocol

from ..core.config import get_settings

logger = logging.getLogger(__name__)


class CredentialProvider(Protocol):
    async def has_credential(self) -> bool: ...

    async def prompt_for_credential(self) -> None: ...


class SettingsCredentialProvider:
    """Server-side provider: the key is whatever GEMINI_API_KEY holds."""

    async def has_credential(self) -> bool:
        return bool(get_settings().gemini_api_key)

    async def prompt_for_credential(self) -> None:
        # No user to prompt on the server. Operators set the key in env.
        logger.warning("No Gemini API key configured. Set GEMINI_API_KEY for high-quality renders.")


async def ensure_credential(provider: Optional[CredentialProvider]) -> None:
    """Ask for a credential when none is selected. Failures are logged only."""
    if provider is None:
        return
    try:
        if not await provider.has_credential():
            await provider.prompt_for_credential()
    except Exception as e:
        logger.warning("API key selection check failed: %s", e)
