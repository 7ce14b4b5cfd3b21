from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from credit800.core.emailing import SmtpConfig, send_credit_changes_email
from credit800.core.letters.rendering import format_money
from credit800.core.models import Collections, ReportStatus, utcnow_iso
from credit800.core.notifications import create_notification
from credit800.core.store import DocumentStore

logger = logging.getLogger(__name__)

BALANCE_CHANGE_THRESHOLD = 10
MEANINGFUL_DELTA = 100
RESET_BATCH = 10

_SPACES_RE = re.compile(r"\s+")


def item_key(item: Dict[str, Any]) -> str:
    """Stable match key for one tradeline across two reports."""

    name = _SPACES_RE.sub(" ", str(item.get("creditorName") or "").lower().strip())
    return f"{name}|{item.get('accountNumber') or ''}|{item.get('bureau') or ''}"


def _balance(item: Dict[str, Any]) -> float:
    try:
        return float(item.get("balance") or 0)
    except (TypeError, ValueError):
        return 0.0


def diff_items(current: List[Dict[str, Any]], previous: List[Dict[str, Any]]) -> Dict[str, Any]:
    current_map = {item_key(i): i for i in current}
    previous_map = {item_key(i): i for i in previous}

    new_items = [
        {
            "creditorName": str(i.get("creditorName") or ""),
            "accountType": str(i.get("accountType") or ""),
            "balance": _balance(i),
            "status": str(i.get("status") or ""),
            "bureau": str(i.get("bureau") or ""),
        }
        for key, i in current_map.items()
        if key not in previous_map
    ]
    removed_items = [
        {
            "creditorName": str(i.get("creditorName") or ""),
            "accountType": str(i.get("accountType") or ""),
            "balance": _balance(i),
            "bureau": str(i.get("bureau") or ""),
        }
        for key, i in previous_map.items()
        if key not in current_map
    ]

    balance_changes = []
    status_changes = []
    for key, cur in current_map.items():
        prev = previous_map.get(key)
        if prev is None:
            continue
        old_balance, new_balance = _balance(prev), _balance(cur)
        if abs(new_balance - old_balance) > BALANCE_CHANGE_THRESHOLD:
            balance_changes.append(
                {
                    "creditorName": str(cur.get("creditorName") or ""),
                    "oldBalance": old_balance,
                    "newBalance": new_balance,
                    "delta": new_balance - old_balance,
                }
            )
        old_status, new_status = str(prev.get("status") or ""), str(cur.get("status") or "")
        if old_status != new_status:
            status_changes.append(
                {
                    "creditorName": str(cur.get("creditorName") or ""),
                    "oldStatus": old_status,
                    "newStatus": new_status,
                }
            )

    total_delta = sum(_balance(i) for i in current) - sum(_balance(i) for i in previous)
    return {
        "newItems": new_items,
        "removedItems": removed_items,
        "balanceChanges": balance_changes,
        "statusChanges": status_changes,
        "totalBalanceDelta": total_delta,
    }


def _previous_report_id(store: DocumentStore, user_id: str, report_id: str) -> Optional[str]:
    analyzed = [
        r
        for r in store.query_user(Collections.CREDIT_REPORTS, user_id)
        if r.get("status") == ReportStatus.ANALYZED
    ]
    analyzed.sort(key=lambda r: r.get("uploadedAt") or "", reverse=True)
    ids = [r["id"] for r in analyzed]
    if report_id in ids:
        idx = ids.index(report_id)
        return ids[idx + 1] if idx + 1 < len(ids) else None
    return ids[1] if len(ids) > 1 else None


def _change_summary(changes: Dict[str, Any]) -> str:
    parts = []
    new_count = len(changes["newItems"])
    removed_count = len(changes["removedItems"])
    delta = changes["totalBalanceDelta"]
    if new_count:
        parts.append(f"{new_count} new item{'s' if new_count != 1 else ''}")
    if removed_count:
        parts.append(f"{removed_count} item{'s' if removed_count != 1 else ''} removed")
    if abs(delta) > MEANINGFUL_DELTA:
        parts.append(f"balance {'up' if delta > 0 else 'down'} {format_money(abs(delta))}")
    return ", ".join(parts)


def compare_reports(
    store: DocumentStore,
    user_id: str,
    report_id: str,
    previous_report_id: Optional[str] = None,
    *,
    email: Optional[str] = None,
    smtp: Optional[SmtpConfig] = None,
) -> Dict[str, Any]:
    """Diff a report against the previous analyzed one and record the change set.

    Meaningful changes raise an in-app notification and, when ``smtp`` and
    ``email`` are given, a summary email.
    """

    previous_id = previous_report_id or _previous_report_id(store, user_id, report_id)
    if previous_id is None:
        store.add(
            Collections.REPORT_CHANGES,
            {
                "userId": user_id,
                "currentReportId": report_id,
                "previousReportId": None,
                "isFirstReport": True,
                "newItems": [],
                "removedItems": [],
                "balanceChanges": [],
                "statusChanges": [],
                "totalBalanceDelta": 0,
                "createdAt": utcnow_iso(),
            },
        )
        return {"isFirstReport": True}

    def items_of(rid: str) -> List[Dict[str, Any]]:
        return store.query(
            Collections.REPORT_ITEMS, [("userId", "==", user_id), ("creditReportId", "==", rid)]
        )

    changes = {
        "userId": user_id,
        "currentReportId": report_id,
        "previousReportId": previous_id,
        "isFirstReport": False,
        **diff_items(items_of(report_id), items_of(previous_id)),
        "createdAt": utcnow_iso(),
    }
    store.add(Collections.REPORT_CHANGES, changes)

    meaningful = (
        bool(changes["newItems"])
        or bool(changes["removedItems"])
        or abs(changes["totalBalanceDelta"]) > MEANINGFUL_DELTA
    )
    if meaningful:
        worsened = any(i["status"] != "CURRENT" for i in changes["newItems"])
        create_notification(
            store,
            user_id,
            "warning" if worsened else "success",
            "Changes detected on your credit report",
            f"Your latest report vs previous: {_change_summary(changes)}.",
            "/dashboard",
        )
        if smtp is not None and email:
            profile = store.get(Collections.USERS, user_id) or {}
            send_credit_changes_email(smtp, email, profile.get("fullName"), changes)
    logger.info(
        "REPORT_COMPARED report=%s previous=%s meaningful=%s", report_id, previous_id, meaningful
    )
    return {**changes, "hasMeaningfulChanges": meaningful}


def reset_user_reports(store: DocumentStore, user_id: str) -> Dict[str, Any]:
    """Delete up to ``RESET_BATCH`` documents per collection; callers repeat until nothing remains."""

    deleted = 0
    remaining = 0
    for collection in (
        Collections.REPORT_ITEMS,
        Collections.CREDIT_SCORES,
        Collections.DISPUTES,
        Collections.CREDIT_REPORTS,
    ):
        docs = store.query_user(collection, user_id)
        for doc in docs[:RESET_BATCH]:
            store.delete(collection, doc["id"])
            deleted += 1
        remaining += max(0, len(docs) - RESET_BATCH)

    logger.info("REPORTS_RESET user=%s deleted=%d remaining=%d", user_id, deleted, remaining)
    if remaining:
        message = f"Deleted {deleted} items. Click again to delete {remaining} more."
    else:
        message = f"All data cleared! Deleted {deleted} items."
    return {"success": True, "deleted": deleted, "remaining": remaining, "message": message}
