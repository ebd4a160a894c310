"""Translator interface and implementations."""

from abc import ABC, abstractmethod
from typing import Optional

import httpx
from openai import OpenAI, OpenAIError

from ..errors import TranslationFailed


class Translator(ABC):
    """Abstract base class for title translators."""

    @abstractmethod
    def translate(self, text: str, target_lang: str) -> str:
        """
        Translate text into the target language.

        Args:
            text: Text to translate
            target_lang: Target language code (e.g. "en", "de", "zh")

        Returns:
            Translated text

        Raises:
            TranslationFailed: If the provider could not translate
        """
        pass


class GoogleFreeTranslator(Translator):
    """No-cost translator backed by the public Google Translate web endpoint."""

    endpoint = "https://translate.googleapis.com/translate_a/single"

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout

    def translate(self, text: str, target_lang: str) -> str:
        """Translate using the free Google endpoint."""
        params = {"client": "gtx", "sl": "auto", "tl": target_lang, "dt": "t", "q": text}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(self.endpoint, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TranslationFailed(f"Google translation failed: {e}") from e

        # [[["translated", "original", ...], ...], ...]
        try:
            return "".join(segment[0] for segment in data[0] if segment and segment[0])
        except (IndexError, TypeError) as e:
            raise TranslationFailed(f"Unexpected Google translation response: {e}") from e


class DeepLTranslator(Translator):
    """DeepL API translator (paid, requires an API key)."""

    def __init__(self, api_key: str, timeout: float = 10.0) -> None:
        """
        Initialize DeepL translator.

        Args:
            api_key: DeepL API key; keys ending in ":fx" use the free API host
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.timeout = timeout
        if api_key.endswith(":fx"):
            self.endpoint = "https://api-free.deepl.com/v2/translate"
        else:
            self.endpoint = "https://api.deepl.com/v2/translate"

    def translate(self, text: str, target_lang: str) -> str:
        """Translate using the DeepL API."""
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    self.endpoint,
                    headers={"Authorization": f"DeepL-Auth-Key {self.api_key}"},
                    data={"text": text, "target_lang": target_lang.upper()},
                )
                response.raise_for_status()
                translations = response.json().get("translations", [])
        except (httpx.HTTPError, ValueError) as e:
            raise TranslationFailed(f"DeepL translation failed: {e}") from e

        if not translations:
            raise TranslationFailed("DeepL returned no translation")
        return translations[0]["text"]


class OpenAITranslator(Translator):
    """OpenAI chat-completions translator (paid, requires an API key)."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
    ) -> None:
        """
        Initialize OpenAI translator.

        Args:
            api_key: OpenAI API key
            model: Model name to use
            base_url: Custom base URL (for compatible servers)
        """
        self.client = OpenAI(api_key=api_key, base_url=base_url)
        self.model = model
        self.total_tokens = 0
        self.api_calls = 0

    def translate(self, text: str, target_lang: str) -> str:
        """Translate using OpenAI."""
        prompt = (
            f"Translate this news headline into the language with code '{target_lang}'. "
            f"Reply with the translation only.\n\n{text}"
        )

        try:
            self.api_calls += 1
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.0,
                max_tokens=200,
            )
        except OpenAIError as e:
            raise TranslationFailed(f"OpenAI translation failed: {e}") from e

        if response.usage:
            self.total_tokens += response.usage.total_tokens

        content = response.choices[0].message.content
        if not content:
            raise TranslationFailed("OpenAI returned an empty translation")
        return content.strip()
