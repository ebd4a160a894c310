"""Title translation providers."""

import logging
from typing import Optional

from .providers import DeepLTranslator, GoogleFreeTranslator, OpenAITranslator, Translator

logger = logging.getLogger(__name__)

__all__ = [
    "Translator",
    "GoogleFreeTranslator",
    "DeepLTranslator",
    "OpenAITranslator",
    "select_translator",
]


def select_translator(
    provider: str,
    deepl_api_key: str = "",
    openai_api_key: str = "",
    openai_model: Optional[str] = None,
) -> Translator:
    """
    Pick the translator for the configured provider.

    Paid providers without an API key fall back to the free Google translator.
    """
    provider = (provider or "").strip().lower()

    if provider == "deepl" and deepl_api_key:
        return DeepLTranslator(deepl_api_key)

    if provider == "openai" and openai_api_key:
        return OpenAITranslator(openai_api_key, model=openai_model or "gpt-4o-mini")

    if provider not in ("", "google", "deepl", "openai"):
        logger.warning(f"Unknown translation provider {provider!r}, using Google")
    return GoogleFreeTranslator()
