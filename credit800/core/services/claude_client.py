from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List

import anthropic
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 529})


class ClaudeAPIError(RuntimeError):
    """Raised when Anthropic returns an error or an empty response."""


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, anthropic.APIConnectionError):
        return True
    if isinstance(exc, anthropic.APIStatusError):
        return exc.status_code in RETRYABLE_STATUS_CODES
    return False


@dataclass
class ClaudeConfig:
    api_key: str
    analysis_model: str = "claude-sonnet-4-20250514"
    fast_model: str = "claude-3-5-haiku-20241022"
    timeout: float = 120.0


class ClaudeClient:
    """Anthropic Messages API wrapper with exponential backoff on transient errors."""

    def __init__(self, config: ClaudeConfig, client: Any = None):
        if not (config.api_key or "").strip():
            raise RuntimeError("ANTHROPIC_API_KEY is not configured")
        self.config = config
        # retries are driven by tenacity below
        self._client = client or anthropic.Anthropic(
            api_key=config.api_key, timeout=config.timeout, max_retries=0
        )

    @retry(
        retry=retry_if_exception(_is_retryable),
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=2, max=60) + wait_random(0, 1),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def _create_message(
        self, *, model: str, content: List[Dict[str, Any]], max_tokens: int
    ) -> str:
        resp = self._client.messages.create(
            model=model,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": content}],
        )
        blocks = getattr(resp, "content", None) or []
        text = getattr(blocks[0], "text", None) if blocks else None
        if not text:
            raise ClaudeAPIError("No response from Claude")
        return text

    def analyze_pdf(self, pdf_bytes: bytes, prompt: str, *, max_tokens: int = 16000) -> str:
        encoded = base64.standard_b64encode(pdf_bytes).decode("utf-8")
        content = [
            {
                "type": "document",
                "source": {"type": "base64", "media_type": "application/pdf", "data": encoded},
            },
            {"type": "text", "text": prompt},
        ]
        logger.info("CLAUDE_ANALYZE_PDF model=%s bytes=%d", self.config.analysis_model, len(pdf_bytes))
        return self._create_message(
            model=self.config.analysis_model, content=content, max_tokens=max_tokens
        )

    def complete(self, prompt: str, *, max_tokens: int = 1024) -> str:
        return self._create_message(
            model=self.config.fast_model,
            content=[{"type": "text", "text": prompt}],
            max_tokens=max_tokens,
        )

    def read_document(
        self, data: bytes, media_type: str, prompt: str, *, max_tokens: int = 1024
    ) -> str:
        """Send a PDF or image with ``prompt`` to the fast model."""

        encoded = base64.standard_b64encode(data).decode("utf-8")
        block_type = "document" if media_type == "application/pdf" else "image"
        content = [
            {
                "type": block_type,
                "source": {"type": "base64", "media_type": media_type, "data": encoded},
            },
            {"type": "text", "text": prompt},
        ]
        return self._create_message(
            model=self.config.fast_model, content=content, max_tokens=max_tokens
        )
