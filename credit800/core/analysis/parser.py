from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from credit800.core.analysis.strategies import generate_removal_strategies
from credit800.core.json_tools import try_fix_to_json
from credit800.core.models import RemovalStrategy, ReportItem

logger = logging.getLogger(__name__)


class AnalysisParseError(ValueError):
    """Model output did not contain a usable analysis object."""


@dataclass
class AnalysisResult:
    items: List[ReportItem]
    credit_score: Optional[int]
    summary: Dict[str, Any] = field(default_factory=dict)
    provider: str = ""


def normalize_bureau(value: str | None) -> str:
    text = (value or "").strip()
    lowered = text.lower()
    if "equifax" in lowered:
        return "Equifax"
    if "experian" in lowered:
        return "Experian"
    if "transunion" in lowered or "trans union" in lowered:
        return "TransUnion"
    return text


def _number(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    if value is None:
        return default
    if isinstance(value, str):
        value = value.replace("$", "").replace(",", "").strip()
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _late_payments(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    if value in (None, "", 0, False):
        return []
    return [value]


def _item_from_payload(raw: Dict[str, Any], bureau: str) -> ReportItem:
    status = str(raw.get("status") or "UNKNOWN").upper()
    account_type = str(raw.get("accountType") or "Unknown")
    balance = _number(raw.get("balance")) or 0.0

    strategies_raw = raw.get("removalStrategies")
    if strategies_raw:
        strategies = [RemovalStrategy.from_dict(s) for s in strategies_raw if isinstance(s, dict)]
    else:
        strategies = generate_removal_strategies(status, account_type, balance)

    is_disputable = raw.get("isDisputable")
    return ReportItem(
        creditor_name=raw.get("creditorName") or "Unknown",
        original_creditor=raw.get("originalCreditor") or None,
        account_number=raw.get("accountNumber") or "****",
        account_type=account_type,
        balance=balance,
        original_balance=_number(raw.get("originalBalance"), None),
        credit_limit=_number(raw.get("creditLimit"), None),
        status=status,
        date_opened=raw.get("dateOpened") or None,
        date_of_first_delinquency=raw.get("dateOfFirstDelinquency") or None,
        last_activity_date=raw.get("lastActivityDate") or None,
        late_payments=_late_payments(raw.get("latePayments")),
        is_disputable=True if is_disputable is None else bool(is_disputable),
        dispute_reason=raw.get("disputeReason") or "Request validation of debt",
        removal_strategies=strategies,
        bureau=raw.get("bureau") or bureau,
    )


def summarize_items(items: List[ReportItem]) -> Dict[str, Any]:
    total = sum(i.balance for i in items)
    return {
        "totalAccounts": len(items),
        "negativeItems": len(items),
        "collections": sum(
            1 for i in items if "COLLECTION" in i.status or "collection" in i.account_type.lower()
        ),
        "latePayments": sum(1 for i in items if "LATE" in i.status or i.late_payments),
        "totalDebt": total,
        "potentialRemovalAmount": total,
    }


def parse_analysis_json(text: str, fallback_bureau: str) -> AnalysisResult:
    """Turn raw model text into an :class:`AnalysisResult`.

    Accepts fenced or bare JSON. The bureau is read from the payload when
    present, otherwise ``fallback_bureau`` is used, and normalized to one of
    the three bureau names when recognisable.
    """

    parsed = try_fix_to_json(text)
    if parsed is None:
        raise AnalysisParseError(f"analysis response is not a JSON object: {(text or '')[:200]!r}")

    bureau = normalize_bureau(parsed.get("bureau") or fallback_bureau)
    items = [
        _item_from_payload(raw, bureau)
        for raw in parsed.get("items") or []
        if isinstance(raw, dict)
    ]

    score_value = _number(parsed.get("score") or parsed.get("creditScore"), None)
    score = int(score_value) if score_value else None

    summary = parsed.get("summary")
    if not isinstance(summary, dict):
        summary = summarize_items(items)

    logger.debug("ANALYSIS_PARSED items=%d bureau=%s score=%s", len(items), bureau, score)
    return AnalysisResult(items=items, credit_score=score, summary=summary)
