"""
Google Gemini generator.

One instance per model name; the fallback chain is a list of these.
Vision-capable models accept the reference image inline.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import google.generativeai as genai

from prompt3d.errors import ConfigurationError
from prompt3d.llm.base import Generator, ImagePart

logger = logging.getLogger(__name__)

_configure_lock = threading.Lock()
_configured_key: Optional[str] = None


def _configure(api_key: str) -> None:
    global _configured_key

    with _configure_lock:
        if _configured_key != api_key:
            genai.configure(api_key=api_key)
            _configured_key = api_key


class GeminiGenerator(Generator):
    def __init__(self, model_name: str, api_key: str):
        self.name = model_name
        self._api_key = api_key
        self._model = None

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _get_model(self):
        if self._model is None:
            if not self._api_key:
                raise ConfigurationError(
                    "Gemini API key not configured. Please set GEMINI_API_KEY environment variable."
                )
            _configure(self._api_key)
            self._model = genai.GenerativeModel(self.name)
            logger.debug("Initialized Gemini model %s", self.name)
        return self._model

    def generate(
        self,
        prompt: str,
        image: Optional[ImagePart] = None,
        *,
        timeout: Optional[float] = None,
    ) -> str:
        model = self._get_model()

        if image is not None:
            contents = [prompt, {"mime_type": image.mime_type, "data": image.data}]
        else:
            contents = prompt

        request_options = {"timeout": timeout} if timeout else None
        response = model.generate_content(contents, request_options=request_options)

        # .text raises ValueError when the candidate was blocked or empty
        return response.text
