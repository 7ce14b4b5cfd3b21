"""Profile, welcome email, account deletion and admin statistics."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any

from flask import Blueprint, jsonify

from credit800.api.auth import is_admin, require_user
from credit800.api.context import get_smtp, get_store
from credit800.api.errors import forbidden
from credit800.api.helpers import parse_body, user
from credit800.api.schemas import ProfileRequest, WelcomeRequest
from credit800.core.billing import ACTIVE_STATUSES, MRR_CENTS_PER_PRO_USER
from credit800.core.emailing import send_welcome_email
from credit800.core.models import USER_OWNED_COLLECTIONS, Collections, utcnow_iso

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__)

ADMIN_DISPUTE_WINDOW = 200
ADMIN_REPORT_WINDOW = 50
REASON_KEY_LENGTH = 60


@users_bp.get("/api/users/profile")
@require_user
def get_profile() -> Any:
    return jsonify({"profile": get_store().get(Collections.USERS, user().uid)})


@users_bp.post("/api/users/profile")
@require_user
def save_profile() -> Any:
    body = parse_body(ProfileRequest)
    data = {**body.model_dump(), "email": user().email or "", "updatedAt": utcnow_iso()}
    get_store().set(Collections.USERS, user().uid, data, merge=True)
    return jsonify({"success": True})


@users_bp.post("/api/users/welcome")
@require_user
def welcome() -> Any:
    if not user().email:
        return jsonify({"ok": False})
    body = parse_body(WelcomeRequest, allow_empty=True)
    sent = send_welcome_email(get_smtp(), user().email, body.name or None)
    return jsonify({"ok": True, "sent": sent})


@users_bp.delete("/api/users")
@require_user
def delete_account() -> Any:
    store = get_store()
    uid = user().uid
    removed = 0
    for collection in USER_OWNED_COLLECTIONS:
        for doc in store.query_user(collection, uid):
            store.delete(collection, doc["id"])
            removed += 1
    for doc in store.query(Collections.REFERRALS, [("referrerId", "==", uid)]):
        store.delete(Collections.REFERRALS, doc["id"])
        removed += 1
    store.delete(Collections.USERS, uid)
    logger.info("ACCOUNT_DELETED user=%s documents=%d", uid, removed)
    return jsonify({"success": True, "deleted": removed})


@users_bp.get("/api/admin/stats")
@require_user
def admin_stats() -> Any:
    if not is_admin(user()):
        raise forbidden()

    store = get_store()
    now = datetime.now(timezone.utc)
    week_ago = (now - timedelta(days=7)).isoformat().replace("+00:00", "Z")
    month_ago = (now - timedelta(days=30)).isoformat().replace("+00:00", "Z")

    users = store.query(Collections.USERS)
    disputes = store.query(
        Collections.DISPUTES, order_by="createdAt", descending=True, limit=ADMIN_DISPUTE_WINDOW
    )
    reports = store.query(
        Collections.CREDIT_REPORTS, order_by="uploadedAt", descending=True, limit=ADMIN_REPORT_WINDOW
    )

    pro = sum(1 for u in users if u.get("subscriptionStatus") in ACTIVE_STATUSES)
    reasons = Counter((d.get("reason") or "Unknown")[:REASON_KEY_LENGTH] for d in disputes)

    return jsonify(
        {
            "totalUsers": len(users),
            "proSubscribers": pro,
            "mrrCents": pro * MRR_CENTS_PER_PRO_USER,
            "disputesLast7": sum(1 for d in disputes if (d.get("createdAt") or "") > week_ago),
            "disputesLast30": sum(1 for d in disputes if (d.get("createdAt") or "") > month_ago),
            "reportsLast7": sum(1 for r in reports if (r.get("uploadedAt") or "") > week_ago),
            "topReasons": [{"reason": r, "count": c} for r, c in reasons.most_common(5)],
            "recentDisputes": [
                {
                    "id": d["id"],
                    "creditorName": d.get("creditorName"),
                    "bureau": d.get("bureau"),
                    "status": d.get("status"),
                    "createdAt": d.get("createdAt"),
                    "userId": d.get("userId"),
                }
                for d in disputes[:10]
            ],
            "generatedAt": utcnow_iso(),
        }
    )
