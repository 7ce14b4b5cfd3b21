"""Rule-of-thumb credit score simulator.

Each scenario returns a score range, clamped to the FICO bounds, plus a short
explanation. The numbers are heuristics for planning, not a scoring model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping

MIN_SCORE = 300
MAX_SCORE = 850


@dataclass(frozen=True)
class Scenario:
    id: str
    title: str
    description: str
    inputs: List[Dict[str, Any]]


SCENARIOS: List[Scenario] = [
    Scenario(
        "pay_off_balance",
        "Pay Off a Balance",
        "See how paying off a credit card or loan balance affects your score.",
        [
            {"key": "currentBalance", "label": "Current Balance ($)", "type": "number", "min": 0, "max": 100000},
            {"key": "creditLimit", "label": "Credit Limit ($)", "type": "number", "min": 0, "max": 100000},
            {"key": "paymentAmount", "label": "Payment Amount ($)", "type": "number", "min": 0, "max": 100000},
        ],
    ),
    Scenario(
        "remove_late_payment",
        "Remove a Late Payment",
        "Estimate the impact of removing a late payment from your report.",
        [
            {"key": "latePayments", "label": "Current Late Payments on File", "type": "number", "min": 1, "max": 20},
            {"key": "severity", "label": "Severity", "type": "select", "options": ["30", "60", "90"]},
        ],
    ),
    Scenario(
        "remove_collection",
        "Remove a Collection",
        "See the potential impact of removing a collection account.",
        [
            {"key": "collectionBalance", "label": "Collection Balance ($)", "type": "number", "min": 0, "max": 50000},
            {"key": "totalCollections", "label": "Total Collections on File", "type": "number", "min": 1, "max": 10},
        ],
    ),
    Scenario(
        "reduce_utilization",
        "Reduce Credit Utilization",
        "See how lowering your overall utilization impacts your score.",
        [
            {"key": "currentUtilization", "label": "Current Utilization (%)", "type": "number", "min": 0, "max": 100},
            {"key": "targetUtilization", "label": "Target Utilization (%)", "type": "number", "min": 0, "max": 100},
        ],
    ),
    Scenario(
        "open_new_account",
        "Open a New Account",
        "Estimate the short-term and long-term effects of opening a new credit account.",
        [
            {"key": "currentAccounts", "label": "Current Number of Accounts", "type": "number", "min": 0, "max": 30},
            {
                "key": "accountType",
                "label": "Account Type",
                "type": "select",
                "options": ["credit_card", "auto_loan", "personal_loan"],
            },
        ],
    ),
    Scenario(
        "add_authorized_user",
        "Become an Authorized User",
        "Estimate the impact of being added as an authorized user on an established account.",
        [
            {"key": "accountAge", "label": "Account Age (years)", "type": "number", "min": 1, "max": 30},
            {"key": "utilization", "label": "Account Utilization (%)", "type": "number", "min": 0, "max": 100},
        ],
    ),
]

SCENARIO_IDS = tuple(s.id for s in SCENARIOS)


def clamp(value: float) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, round(value)))


def _result(score: int, low: float, high: float, explanation: str, impact: str) -> Dict[str, Any]:
    return {
        "currentScore": score,
        "newScoreMin": clamp(low),
        "newScoreMax": clamp(high),
        "explanation": explanation,
        "impact": impact,
    }


def _pay_off_balance(score: int, p: Mapping[str, float]) -> Dict[str, Any]:
    balance = p.get("currentBalance", 0)
    limit = p.get("creditLimit", 1)
    payment = p.get("paymentAmount", 0)
    current_util = balance / limit * 100 if limit > 0 else 0
    new_util = max(0, balance - payment) / limit * 100 if limit > 0 else 0
    drop = current_util - new_util
    boost = round(drop * 0.7) if drop > 0 else 0
    return _result(
        score,
        score + max(0, boost - 10),
        score + boost + 5,
        f"Reducing utilization from {round(current_util)}% to {round(new_util)}% could boost your "
        "score. Utilization accounts for ~30% of your score.",
        "positive" if boost > 0 else "neutral",
    )


def _remove_late_payment(score: int, p: Mapping[str, float]) -> Dict[str, Any]:
    late = p.get("latePayments", 1)
    severity = p.get("severity", 30)
    multiplier = 1.5 if severity >= 90 else 1.2 if severity >= 60 else 1.0
    boost = round((30 if late == 1 else 20) * multiplier)
    return _result(
        score,
        score + boost - 10,
        score + boost + 15,
        f"Removing a {int(severity)}-day late payment could significantly help. Payment history is "
        "35% of your score, the single largest factor.",
        "positive",
    )


def _remove_collection(score: int, p: Mapping[str, float]) -> Dict[str, Any]:
    balance = p.get("collectionBalance", 0)
    total = p.get("totalCollections", 1)
    balance_impact = 15 if balance > 5000 else 10 if balance > 1000 else 5
    only = total <= 1
    boost = (40 if only else 20) + balance_impact
    return _result(
        score,
        score + boost - 15,
        score + boost + 20,
        f"Removing {'your only' if only else 'a'} collection account (${balance:,.0f}) could provide a "
        "substantial score increase. Collections heavily impact payment history.",
        "positive",
    )


def _reduce_utilization(score: int, p: Mapping[str, float]) -> Dict[str, Any]:
    current = p.get("currentUtilization", 50)
    target = p.get("targetUtilization", 10)
    drop = current - target
    if drop <= 0:
        return _result(
            score,
            score,
            score,
            "Target utilization is not lower than current. No change expected.",
            "neutral",
        )
    boost = round(drop * 0.6)
    if target <= 10:
        boost += 10
    if target <= 1:
        boost += 5
    return _result(
        score,
        score + boost - 8,
        score + boost + 8,
        f"Dropping utilization from {current:g}% to {target:g}% targets the ideal range. Under 10% "
        "is optimal, under 30% is good.",
        "positive",
    )


def _open_new_account(score: int, p: Mapping[str, float]) -> Dict[str, Any]:
    accounts = p.get("currentAccounts", 3)
    net = -8 + (5 if accounts < 3 else 0) + (-5 if accounts > 0 else 0)
    return _result(
        score,
        score + net - 5,
        score + net + 10,
        "Opening a new account adds a hard inquiry (-5 to -10 pts short-term) and lowers average "
        "account age. However, it may improve credit mix (+5 pts) over time.",
        "negative" if net < -3 else "neutral",
    )


def _add_authorized_user(score: int, p: Mapping[str, float]) -> Dict[str, Any]:
    age = p.get("accountAge", 5)
    util = p.get("utilization", 10)
    boost = min(20, age * 3) + (10 if util <= 10 else 5 if util <= 30 else 0)
    return _result(
        score,
        score + boost - 10,
        score + boost + 5,
        f"Being added to a {age:g}-year-old account with {util:g}% utilization can boost your "
        "average age of accounts and lower overall utilization.",
        "positive",
    )


_HANDLERS: Dict[str, Callable[[int, Mapping[str, float]], Dict[str, Any]]] = {
    "pay_off_balance": _pay_off_balance,
    "remove_late_payment": _remove_late_payment,
    "remove_collection": _remove_collection,
    "reduce_utilization": _reduce_utilization,
    "open_new_account": _open_new_account,
    "add_authorized_user": _add_authorized_user,
}


def _numeric_params(params: Mapping[str, Any]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for key, value in (params or {}).items():
        try:
            out[key] = float(value)
        except (TypeError, ValueError):
            continue
    return out


def simulate_score_change(current_score: int, scenario_id: str, params: Mapping[str, Any]) -> Dict[str, Any]:
    handler = _HANDLERS.get(scenario_id)
    if handler is None:
        return _result(current_score, current_score, current_score, "Unknown scenario.", "neutral")
    return handler(current_score, _numeric_params(params))
