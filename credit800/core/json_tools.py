import json
import logging
import re
from typing import Any, Dict

logger = logging.getLogger(__name__)

_TRAILING_COMMA_RE = re.compile(r",(?=\s*[}\]])")
_SINGLE_QUOTE_KEY_RE = re.compile(r"'([^']*)'(?=\s*:)")
_SINGLE_QUOTE_VALUE_RE = re.compile(r":\s*'([^']*)'")
_UNQUOTED_KEY_RE = re.compile(r"(?P<prefix>^|[,{])\s*(?P<key>[A-Za-z_][A-Za-z0-9_-]*)\s*(?=:)")


def _basic_clean(content: str) -> str:
    """Apply regex-based fixes for common model JSON slips."""
    cleaned = _TRAILING_COMMA_RE.sub("", content)
    cleaned = _SINGLE_QUOTE_KEY_RE.sub(r'"\1"', cleaned)
    cleaned = _SINGLE_QUOTE_VALUE_RE.sub(r': "\1"', cleaned)
    cleaned = _UNQUOTED_KEY_RE.sub(lambda m: f'{m.group("prefix")}"{m.group("key")}"', cleaned)
    return cleaned


def _loads_object(candidate: str) -> Dict[str, Any] | None:
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        cleaned = _basic_clean(candidate)
        if cleaned == candidate:
            return None
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError:
            return None
        logger.debug("JSON_REPAIRED chars=%d", len(candidate))
    return parsed if isinstance(parsed, dict) else None


def try_fix_to_json(text: str | None) -> Dict[str, Any] | None:
    """Extract and parse a JSON object from model output if possible.

    Markdown fences (with or without a ``json`` tag) are stripped first, then
    the outermost ``{...}`` span is tried, then the raw text. Each candidate
    that fails to parse gets one pass of trailing-comma and quote repair.

    Returns:
        dict | None: Parsed JSON object when extraction succeeds, otherwise ``None``.
    """

    if text is None:
        return None

    candidates = []
    fenced = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if fenced:
        inner = fenced.group(1)
        obj = re.search(r"\{[\s\S]*\}", inner)
        candidates.append(obj.group(0) if obj else inner)

    loose = re.search(r"\{[\s\S]*\}", text)
    if loose:
        candidates.append(loose.group(0))

    candidates.append(text)

    for candidate in candidates:
        stripped = candidate.strip()
        if not stripped:
            continue
        parsed = _loads_object(stripped)
        if parsed is not None:
            return parsed
    return None
