from __future__ import annotations

import logging
import secrets
from typing import Any, Dict

from credit800.core.models import Collections, utcnow_iso
from credit800.core.store import DocumentStore

logger = logging.getLogger(__name__)

CODE_PREFIX = "C800-"
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6


class ReferralError(ValueError):
    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.status = status


def generate_code() -> str:
    return CODE_PREFIX + "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def get_or_create_referral(store: DocumentStore, user_id: str) -> Dict[str, Any]:
    existing = store.query(Collections.REFERRALS, [("referrerId", "==", user_id)], limit=1)
    if existing:
        return existing[0]

    data = {
        "referrerId": user_id,
        "referralCode": generate_code(),
        "referredUsers": [],
        "rewards": 0,
        "createdAt": utcnow_iso(),
    }
    referral_id = store.add(Collections.REFERRALS, data)
    logger.info("REFERRAL_CODE_CREATED user=%s code=%s", user_id, data["referralCode"])
    return {"id": referral_id, **data}


def apply_referral(store: DocumentStore, referral_code: str, new_user_id: str) -> Dict[str, Any]:
    """Credit the referrer of ``referral_code`` with ``new_user_id``."""

    matches = store.query(Collections.REFERRALS, [("referralCode", "==", referral_code)], limit=1)
    if not matches:
        raise ReferralError("Invalid referral code", status=404)
    referral = matches[0]

    if referral.get("referrerId") == new_user_id:
        raise ReferralError("You cannot use your own referral code")

    profile = store.get(Collections.USERS, new_user_id) or {}
    if profile.get("referredBy") and profile["referredBy"] != referral_code:
        raise ReferralError("You have already used a referral code", status=409)

    referred = list(referral.get("referredUsers") or [])
    if new_user_id in referred:
        return {"success": True, "alreadyReferred": True}

    store.update(
        Collections.REFERRALS,
        referral["id"],
        {"referredUsers": referred + [new_user_id], "rewards": int(referral.get("rewards") or 0) + 1},
    )
    store.set(Collections.USERS, new_user_id, {"referredBy": referral_code}, merge=True)
    logger.info("REFERRAL_APPLIED code=%s user=%s", referral_code, new_user_id)
    return {"success": True}
