from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

logger = logging.getLogger(__name__)

__all__ = ["GeminiClient", "GeminiConfig", "GeminiAPIError"]


class GeminiAPIError(RuntimeError):
    """Gemini returned no usable text."""


_RETRYABLE = (
    google_exceptions.ResourceExhausted,
    google_exceptions.InternalServerError,
    google_exceptions.BadGateway,
    google_exceptions.ServiceUnavailable,
    ConnectionError,
)


@dataclass
class GeminiConfig:
    api_key: str
    model: str = "gemini-2.0-flash"
    temperature: float = 0.0
    max_output_tokens: int = 65536


class GeminiClient:
    """Gemini document analysis client keyed by API key."""

    def __init__(self, config: GeminiConfig, model: Any = None) -> None:
        if not (config.api_key or "").strip():
            raise RuntimeError("GEMINI_API_KEY is not configured")
        self.config = config
        self._model = model

    def _get_model(self) -> Any:
        if self._model is None:
            genai.configure(api_key=self.config.api_key)
            self._model = genai.GenerativeModel(
                model_name=self.config.model,
                generation_config={
                    "temperature": self.config.temperature,
                    "top_p": 1,
                    "top_k": 1,
                    "max_output_tokens": self.config.max_output_tokens,
                },
            )
        return self._model

    @retry(
        retry=retry_if_exception_type(_RETRYABLE),
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=2, max=60) + wait_random(0, 1),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def analyze_pdf(self, pdf_bytes: bytes, prompt: str) -> str:
        logger.info("GEMINI_ANALYZE_PDF model=%s bytes=%d", self.config.model, len(pdf_bytes))
        response = self._get_model().generate_content(
            [{"mime_type": "application/pdf", "data": pdf_bytes}, prompt]
        )
        text = getattr(response, "text", None)
        if not text:
            raise GeminiAPIError("No response from Gemini")
        return text
