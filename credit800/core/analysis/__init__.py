from credit800.core.analysis.action_plan import build_action_plan, generate_action_plan
from credit800.core.analysis.analyzer import AnalysisError, ReportAnalyzer, build_analyzer
from credit800.core.analysis.parser import AnalysisParseError, AnalysisResult, parse_analysis_json
from credit800.core.analysis.processor import apply_sample_analysis, process_report
from credit800.core.analysis.strategies import generate_removal_strategies

__all__ = [
    "AnalysisError",
    "AnalysisParseError",
    "AnalysisResult",
    "ReportAnalyzer",
    "apply_sample_analysis",
    "build_action_plan",
    "build_analyzer",
    "generate_action_plan",
    "generate_removal_strategies",
    "parse_analysis_json",
    "process_report",
]
