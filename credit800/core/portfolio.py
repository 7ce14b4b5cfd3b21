from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from credit800.core.models import Collections, utcnow_iso
from credit800.core.store import DocumentStore

logger = logging.getLogger(__name__)

ASSET_TYPES = (
    "checking",
    "savings",
    "investment",
    "retirement",
    "crypto",
    "real_estate",
    "vehicle",
    "other_asset",
)
LIABILITY_TYPES = ("credit_card", "mortgage", "student_loan", "auto_loan", "other_liability")
ACCOUNT_TYPES = ASSET_TYPES + LIABILITY_TYPES

ACCOUNT_TYPE_LABELS = {
    "checking": "Checking",
    "savings": "Savings",
    "investment": "Investments",
    "retirement": "Retirement",
    "crypto": "Crypto",
    "real_estate": "Real Estate",
    "vehicle": "Vehicle",
    "other_asset": "Other Asset",
    "credit_card": "Credit Card",
    "mortgage": "Mortgage",
    "student_loan": "Student Loan",
    "auto_loan": "Auto Loan",
    "other_liability": "Other Liability",
}

RETIREMENT_SUBTYPES = frozenset({"401k", "ira", "roth", "403b", "pension"})


def is_asset(account_type: str) -> bool:
    return account_type in ASSET_TYPES


def map_plaid_type(plaid_type: str, subtype: Optional[str]) -> str:
    """Map a Plaid account type/subtype to a portfolio account type."""

    t = (plaid_type or "").lower()
    s = (subtype or "").lower()
    if t == "depository":
        return "savings" if s == "savings" else "checking"
    if t == "investment":
        return "retirement" if s in RETIREMENT_SUBTYPES else "investment"
    if t == "credit":
        return "credit_card"
    if t == "loan":
        return {"mortgage": "mortgage", "student": "student_loan", "auto": "auto_loan"}.get(
            s, "other_liability"
        )
    return "other_asset"


def compute_totals(accounts: Iterable[Dict[str, Any]]) -> Dict[str, float]:
    assets = 0.0
    liabilities = 0.0
    for account in accounts:
        if account.get("isHidden"):
            continue
        balance = float(account.get("balance") or 0)
        if is_asset(account.get("type", "")):
            assets += balance
        else:
            liabilities += balance
    return {"totalAssets": assets, "totalLiabilities": liabilities, "netWorth": assets - liabilities}


def compute_allocation(accounts: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    totals: Dict[str, float] = {}
    for account in accounts:
        balance = float(account.get("balance") or 0)
        if account.get("isHidden") or not is_asset(account.get("type", "")) or balance <= 0:
            continue
        totals[account["type"]] = totals.get(account["type"], 0.0) + balance
    slices = [{"name": ACCOUNT_TYPE_LABELS[t], "type": t, "value": v} for t, v in totals.items()]
    return sorted(slices, key=lambda s: s["value"], reverse=True)


def snapshot_net_worth(store: DocumentStore, user_id: str, *, today: Optional[date] = None) -> Dict[str, Any]:
    """Record today's net worth; one snapshot per user per day."""

    accounts = store.query(
        Collections.PORTFOLIO_ACCOUNTS, [("userId", "==", user_id), ("isHidden", "==", False)]
    )
    day = (today or date.today()).isoformat()
    snapshot = {
        "userId": user_id,
        "date": day,
        **compute_totals(accounts),
        "createdAt": utcnow_iso(),
    }
    store.set(Collections.PORTFOLIO_SNAPSHOTS, f"{user_id}_{day}", snapshot)
    logger.debug("NET_WORTH_SNAPSHOT user=%s date=%s net=%.2f", user_id, day, snapshot["netWorth"])
    return snapshot


def new_account(
    user_id: str,
    *,
    name: str,
    institution: str,
    type: str,
    balance: float,
    currency: str = "USD",
    source: str = "manual",
    **extra: Any,
) -> Dict[str, Any]:
    now = utcnow_iso()
    return {
        "userId": user_id,
        "name": name,
        "institution": institution,
        "type": type,
        "source": source,
        "balance": balance,
        "currency": currency,
        "isHidden": False,
        "createdAt": now,
        "updatedAt": now,
        **extra,
    }
