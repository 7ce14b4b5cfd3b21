from __future__ import annotations

import logging
from typing import Optional

from credit800.core.analysis.parser import AnalysisResult, parse_analysis_json
from credit800.core.analysis.prompts import CLAUDE_PROMPT, GEMINI_PROMPT
from credit800.core.services.claude_client import ClaudeClient, ClaudeConfig
from credit800.core.services.gemini_client import GeminiClient, GeminiConfig

logger = logging.getLogger(__name__)


class AnalysisError(RuntimeError):
    """No provider produced a usable analysis; the message is user-facing."""


class ReportAnalyzer:
    """Extract negative items from a credit report PDF.

    Gemini is the primary model. When it fails and an Anthropic key is set,
    Claude is tried once with its own prompt; otherwise the Gemini error is
    surfaced.
    """

    def __init__(self, gemini: Optional[GeminiClient], claude: Optional[ClaudeClient] = None):
        self.gemini = gemini
        self.claude = claude

    def analyze(self, pdf_bytes: bytes, bureau: str) -> AnalysisResult:
        if self.gemini is None:
            raise AnalysisError("GEMINI_API_KEY not configured")

        try:
            result = parse_analysis_json(self.gemini.analyze_pdf(pdf_bytes, GEMINI_PROMPT), bureau)
            result.provider = "gemini"
            logger.info("ANALYSIS_COMPLETE provider=gemini items=%d", len(result.items))
            return result
        except Exception as gemini_exc:
            logger.error("ANALYSIS_GEMINI_FAILED error=%s", gemini_exc)
            if self.claude is None:
                raise AnalysisError(f"AI analysis failed: {gemini_exc}") from gemini_exc

            try:
                logger.info("ANALYSIS_FALLBACK provider=claude")
                result = parse_analysis_json(self.claude.analyze_pdf(pdf_bytes, CLAUDE_PROMPT), bureau)
            except Exception as claude_exc:
                logger.error("ANALYSIS_CLAUDE_FAILED error=%s", claude_exc)
                raise AnalysisError(
                    f"All AI providers failed. Gemini: {gemini_exc}. Claude: {claude_exc}"
                ) from claude_exc

            for item in result.items:
                item.bureau = item.bureau or bureau
            result.provider = "claude"
            logger.info("ANALYSIS_COMPLETE provider=claude items=%d", len(result.items))
            return result


def build_analyzer(
    gemini_api_key: str | None,
    anthropic_api_key: str | None,
    *,
    claude_config: Optional[ClaudeConfig] = None,
) -> ReportAnalyzer:
    gemini = GeminiClient(GeminiConfig(api_key=gemini_api_key)) if gemini_api_key else None
    claude = None
    if anthropic_api_key:
        claude = ClaudeClient(claude_config or ClaudeConfig(api_key=anthropic_api_key))
    return ReportAnalyzer(gemini, claude)
