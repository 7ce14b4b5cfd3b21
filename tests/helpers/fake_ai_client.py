import json
from typing import Any, Dict, List


class FakeAIClient:
    """Stand-in for :class:`credit800.core.services.ai_client.AIClient` in tests."""

    def __init__(self):
        self.chat_payloads: List[Dict[str, Any]] = []
        self.chat_responses: List[Any] = []

    def add_chat_response(self, content: Any) -> None:
        """Queue a payload dict, or an exception to raise."""

        self.chat_responses.append(content)

    def chat_completion(self, *, messages, **kwargs):
        self.chat_payloads.append({"messages": messages, **kwargs})
        content = self.chat_responses.pop(0) if self.chat_responses else None
        if isinstance(content, Exception):
            raise content
        raw = json.dumps(content) if content is not None else None
        return {"json": content, "raw_content": raw, "raw": None}


class FakeClaude:
    """Stand-in for :class:`credit800.core.services.claude_client.ClaudeClient`."""

    def __init__(self, text: str = "", *, error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def _answer(self, **call: Any) -> str:
        self.calls.append(call)
        if self.error is not None:
            raise self.error
        return self.text

    def complete(self, prompt: str, **kwargs: Any) -> str:
        return self._answer(kind="complete", prompt=prompt)

    def read_document(self, data: bytes, media_type: str, prompt: str, **kwargs: Any) -> str:
        return self._answer(kind="document", media_type=media_type, size=len(data))

    def analyze_pdf(self, pdf_bytes: bytes, prompt: str, **kwargs: Any) -> str:
        return self._answer(kind="analyze", size=len(pdf_bytes))


class FakeGemini:
    def __init__(self, text: str = "", *, error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls = 0

    def analyze_pdf(self, pdf_bytes: bytes, prompt: str) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.text
