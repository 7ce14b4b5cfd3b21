from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from credit800.core.letters.rendering import format_money
from credit800.core.models import ActionPlan, Collections, PlanStep
from credit800.core.store import DocumentStore

logger = logging.getLogger(__name__)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def _balance(item: Dict[str, Any]) -> float:
    try:
        return float(item.get("balance") or 0)
    except (TypeError, ValueError):
        return 0.0


def _limit(item: Dict[str, Any]) -> float:
    try:
        return float(item.get("creditLimit") or 0)
    except (TypeError, ValueError):
        return 0.0


def _names(items: List[Dict[str, Any]]) -> str:
    return ", ".join(str(i.get("creditorName")) for i in items[:3])


def is_collection(item: Dict[str, Any]) -> bool:
    return "COLLECTION" in str(item.get("status")) or "collection" in str(item.get("accountType")).lower()


def is_charge_off(item: Dict[str, Any]) -> bool:
    status = str(item.get("status"))
    return "CHARGE" in status or "WRITTEN" in status


def has_late_payments(item: Dict[str, Any]) -> bool:
    status = str(item.get("status"))
    late = item.get("latePayments")
    return "LATE" in status or "DELINQUENT" in status or (isinstance(late, list) and len(late) > 0)


def is_high_utilization(item: Dict[str, Any]) -> bool:
    limit = _limit(item)
    return limit > 0 and _balance(item) / limit > 0.3


def build_plan_steps(items: List[Dict[str, Any]]) -> List[PlanStep]:
    """Ordered remediation steps for the negative items on file."""

    collections = [i for i in items if is_collection(i)]
    charge_offs = [i for i in items if is_charge_off(i)]
    late = [i for i in items if has_late_payments(i)]
    medical = [i for i in collections if "medical" in str(i.get("accountType")).lower()]
    high_util = [i for i in items if is_high_utilization(i)]

    steps: List[PlanStep] = []

    def add(title: str, description: str, category: str, impact: str, timeframe: str) -> None:
        steps.append(PlanStep(len(steps) + 1, title, description, category, impact, timeframe))

    if collections:
        debt = sum(_balance(i) for i in collections)
        more = " and others" if len(collections) > 3 else ""
        add(
            "Dispute Collection Accounts",
            f"You have {_plural(len(collections), 'collection account')} totaling {format_money(debt)} "
            f"from {_names(collections)}{more}. Send debt validation letters. Collections removal "
            "can boost your score 20-40 points.",
            "DISPUTE",
            "HIGH",
            "1-2 weeks to send, 30 days for response",
        )
    if medical:
        total = sum(_balance(i) for i in medical)
        add(
            "Challenge Medical Collections via HIPAA",
            f"You have {_plural(len(medical), 'medical collection')} totaling {format_money(total)}. "
            "Request proof of HIPAA authorization.",
            "DISPUTE",
            "HIGH",
            "2-4 weeks",
        )
    if charge_offs:
        add(
            "Negotiate Charge-Off Removal",
            f"You have {_plural(len(charge_offs), 'charge-off')} from {_names(charge_offs)}. "
            "Negotiate pay-for-delete with the original creditor's executive office.",
            "DISPUTE",
            "HIGH",
            "2-6 weeks",
        )
    if high_util:
        details = "; ".join(
            f"{i.get('creditorName')} ({round(_balance(i) / _limit(i) * 100)}% used)" for i in high_util
        )
        add(
            "Pay Down High Credit Card Balances",
            f"Cards with high utilization: {details}. Pay down to below 30% for an immediate "
            "20-50 point boost.",
            "UTILIZATION",
            "HIGH",
            "1-3 months",
        )
    if late:
        add(
            "Send Goodwill Letters for Late Payments",
            f"You have late payment records on {_plural(len(late), 'account')} including {_names(late)}.",
            "DISPUTE",
            "MEDIUM",
            "2-4 weeks",
        )
    add(
        "Set Up Automatic Payments on All Accounts",
        "Enroll every open account in automatic payments. Payment history is 35% of your credit score.",
        "PAYMENT",
        "HIGH",
        "1 week",
    )
    if any(i.get("isDisputable") for i in items):
        add(
            "File Disputes with All Three Credit Bureaus",
            "File formal disputes with Equifax, Experian, and TransUnion for each inaccurate item. "
            "Bureaus have 30 days to investigate or must delete.",
            "DISPUTE",
            "HIGH",
            "30-45 days",
        )
    add(
        "Become an Authorized User on a Strong Account",
        "Ask a family member to add you as an authorized user on their oldest card with perfect "
        "history. Can add 20-50 points.",
        "CREDIT_MIX",
        "MEDIUM",
        "1-2 weeks",
    )
    add(
        "Monitor Your Credit Monthly",
        "Pull and upload your credit reports monthly to track progress and catch new errors early.",
        "GENERAL",
        "LOW",
        "Ongoing",
    )
    return steps


def build_action_plan(
    user_id: str,
    report_id: Optional[str],
    items: List[Dict[str, Any]],
    current_score: Optional[int],
) -> ActionPlan:
    steps = build_plan_steps(items)
    collections = [i for i in items if is_collection(i)]
    high_util = [i for i in items if is_high_utilization(i)]

    parts: List[str] = []
    if current_score:
        parts.append(f"Your current score is {current_score}.")
    if collections:
        debt = sum(_balance(i) for i in collections)
        parts.append(
            f"You have {_plural(len(collections), 'collection')} totaling {format_money(debt)} "
            "that should be disputed immediately."
        )
    if high_util:
        verb = "cards are" if len(high_util) > 1 else "card is"
        parts.append(
            f"{len(high_util)} {verb} above 30% utilization. Paying these down will give you "
            "the fastest score boost."
        )
    parts.append(f"Follow these {len(steps)} steps in order for maximum impact.")

    title = f"Your Path from {current_score} to 800" if current_score else "Your Path to 800"
    return ActionPlan(
        user_id=user_id,
        report_id=report_id,
        title=title,
        summary=" ".join(parts),
        steps=steps,
    )


def latest_score(store: DocumentStore, user_id: str) -> Optional[int]:
    scores = store.query_user(
        Collections.CREDIT_SCORES, user_id, order_by="recordedAt", descending=True, limit=1
    )
    if not scores:
        return None
    try:
        return int(scores[0].get("score"))
    except (TypeError, ValueError):
        return None


def generate_action_plan(store: DocumentStore, user_id: str, report_id: Optional[str]) -> Dict[str, Any]:
    """Build a plan from the user's stored items and latest score and save it."""

    items = store.query_user(Collections.REPORT_ITEMS, user_id)
    plan = build_action_plan(user_id, report_id, items, latest_score(store, user_id))
    data = plan.to_dict()
    plan_id = store.add(Collections.ACTION_PLANS, data)
    logger.info("ACTION_PLAN_SAVED user=%s report=%s steps=%d", user_id, report_id, len(plan.steps))
    return {"id": plan_id, **data}
