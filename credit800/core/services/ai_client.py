from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from openai import OpenAI

from credit800.core.json_tools import try_fix_to_json

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "sk-your-openai-key-here"


@dataclass
class AIConfig:
    """Configuration for :class:`AIClient`."""

    api_key: str
    base_url: str = "https://api.openai.com/v1"
    chat_model: str = "gpt-4o-mini"
    timeout: float | None = 30.0
    max_retries: int = 0

    @property
    def usable(self) -> bool:
        key = (self.api_key or "").strip()
        return bool(key) and key != PLACEHOLDER_API_KEY


class AIClient:
    """Thin wrapper around the OpenAI client used for JSON lookups."""

    def __init__(self, config: AIConfig):
        api_key = (config.api_key or "").strip()
        if not api_key:
            logger.error(
                "AI_CLIENT_CREDENTIAL_ERROR model=%s base_url=%s detail=missing_api_key",
                config.chat_model,
                config.base_url,
            )
            raise RuntimeError(
                "AI client requires an OpenAI API key. Set OPENAI_API_KEY before starting."
            )

        base_url = (config.base_url or "").strip() or "https://api.openai.com/v1"
        logger.info(
            "AI_CLIENT_READY model=%s base_url=%s key_present=yes",
            config.chat_model,
            base_url,
        )

        config.api_key = api_key
        config.base_url = base_url
        self.config = config
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

    def chat_completion(
        self,
        *,
        messages: List[Dict[str, Any]],
        model: str | None = None,
        temperature: float = 0,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Run a JSON-mode chat completion and return a normalized response.

        The result carries ``json`` (the parsed object or ``None``),
        ``raw_content`` and ``raw`` (the SDK response).
        """

        model = model or self.config.chat_model
        kwargs.setdefault("response_format", {"type": "json_object"})

        resp = self._client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            **kwargs,
        )

        usage = getattr(resp, "usage", None)
        if usage is not None:
            if isinstance(usage, Mapping):
                total_tokens = usage.get("total_tokens")
            else:
                total_tokens = getattr(usage, "total_tokens", None)
            logger.info(
                "AI_CLIENT_CHAT_USAGE model=%s total_tokens=%s",
                model,
                total_tokens if total_tokens is not None else "?",
            )

        message = resp.choices[0].message
        raw_content = getattr(message, "content", None)
        parsed: Dict[str, Any] | None = None
        if raw_content:
            try:
                loaded = json.loads(raw_content)
                parsed = loaded if isinstance(loaded, dict) else None
            except json.JSONDecodeError:
                parsed = try_fix_to_json(raw_content)
                if parsed is None:
                    logger.warning("AI_CLIENT_JSON_PARSE_FAILED model=%s", model)

        return {"json": parsed, "raw_content": raw_content, "raw": resp}


def build_ai_client(config: AIConfig) -> AIClient:
    """Return an :class:`AIClient` instance from ``config``."""

    return AIClient(config)
