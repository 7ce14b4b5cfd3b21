from __future__ import annotations

import logging
import re
from typing import Any, Dict

from credit800.core.analysis.prompts import RESPONSE_PARSE_PROMPT
from credit800.core.json_tools import try_fix_to_json
from credit800.core.services.claude_client import ClaudeClient

logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class ResponseParseError(RuntimeError):
    pass


def media_type_for(filename: str, content_type: str | None) -> str:
    content_type = content_type or "application/pdf"
    if content_type == "application/pdf" or (filename or "").lower().endswith(".pdf"):
        return "application/pdf"
    return content_type


def _extract(text: str) -> Dict[str, Any]:
    match = _JSON_OBJECT_RE.search(text or "")
    parsed = try_fix_to_json(match.group(0)) if match else None
    if parsed is None:
        raise ResponseParseError("No JSON in Claude response")
    logger.info("BUREAU_RESPONSE_PARSED outcome=%s", parsed.get("outcome"))
    return parsed


def parse_bureau_response(
    claude: ClaudeClient, data: bytes, *, filename: str, content_type: str | None
) -> Dict[str, Any]:
    """Read an uploaded bureau response letter (PDF or image)."""

    media_type = media_type_for(filename, content_type)
    return _extract(claude.read_document(data, media_type, RESPONSE_PARSE_PROMPT))


def parse_bureau_response_text(claude: ClaudeClient, letter_text: str) -> Dict[str, Any]:
    """Same extraction for a letter the user pasted as text."""

    prompt = f"{RESPONSE_PARSE_PROMPT}\n\nLetter:\n{letter_text}"
    return _extract(claude.complete(prompt))
