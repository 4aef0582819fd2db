"""Message translation using the Anthropic Claude API."""

import os
from typing import Protocol

import anthropic

from ..config import LANGUAGE_OPTIONS

DEFAULT_TRANSLATION_MODEL = "claude-3-5-haiku-latest"

SYSTEM_PROMPT = (
    "You translate short operational chat messages sent by a live event crew. "
    "Reply with the translation only. Keep @mentions, numbers, times and "
    "URLs exactly as written."
)


class ITranslator(Protocol):
    """Abstraction for machine translation."""

    async def translate(
        self, text: str, target_language: str, source_language: str | None = None
    ) -> str:
        """Translate text into target_language (ISO code)."""
        ...


class Translator:
    """Anthropic Claude translation provider."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int = 1024,
    ):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")

        self._model = model or os.getenv("TRANSLATION_MODEL", DEFAULT_TRANSLATION_MODEL)
        self._max_tokens = max_tokens
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)

    async def translate(
        self, text: str, target_language: str, source_language: str | None = None
    ) -> str:
        """Translate text using Claude API."""
        target = LANGUAGE_OPTIONS.get(target_language, target_language)
        source = LANGUAGE_OPTIONS.get(source_language or "", source_language)
        instruction = f"Translate into {target}"
        if source:
            instruction += f" from {source}"

        try:
            response = await self._client.messages.create(
                model=self._model,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": f"{instruction}:\n\n{text}"}],
                max_tokens=self._max_tokens,
            )
            return response.content[0].text.strip()

        except Exception as e:
            # Re-raise for handling by caller
            raise RuntimeError(f"Translation API error: {e}") from e
