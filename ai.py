from __future__ import annotations

import logging
import os
from typing import Optional, Protocol

from openai import OpenAI, OpenAIError

from errors import GenerationError

logger = logging.getLogger("math-practice.ai")

AI_API_KEY = os.getenv("AI_API_KEY", "")
AI_BASE_URL = os.getenv("AI_BASE_URL") or None
AI_MODEL = os.getenv("AI_MODEL", "gpt-4o-mini")


class TextGenerator(Protocol):
    def generate_text(self, prompt: str) -> str: ...


class OpenAITextGenerator:
    """Chat-completions backed generator for any OpenAI-compatible endpoint.

    No retries: a failed call is reported once and callers fall back to
    canned content.
    """

    def __init__(
        self,
        api_key: str = AI_API_KEY,
        model: str = AI_MODEL,
        base_url: Optional[str] = AI_BASE_URL,
    ):
        self.model = model
        self._api_key = api_key
        self._base_url = base_url
        self._client: Optional[OpenAI] = None

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key, base_url=self._base_url, max_retries=0)
        return self._client

    def generate_text(self, prompt: str) -> str:
        if not self.configured:
            raise GenerationError("AI_API_KEY not configured on server.")
        try:
            resp = self._get_client().chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as e:
            logger.warning("text generation failed: %s: %s", type(e).__name__, e)
            raise GenerationError(str(e)) from e

        content = resp.choices[0].message.content if resp.choices else None
        if not content or not content.strip():
            raise GenerationError("empty completion")
        return content
