from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from credit800.core.models import Collections, utcnow_iso
from credit800.core.store import DocumentStore

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = (
    "analysis_complete",
    "dispute_mailed",
    "dispute_response",
    "goal_achieved",
    "report_changes",
    "referral",
    "general",
    "success",
    "warning",
)


def create_notification(
    store: DocumentStore,
    user_id: str,
    type: str,
    title: str,
    message: str,
    action_url: Optional[str] = None,
) -> str:
    notification_id = store.add(
        Collections.NOTIFICATIONS,
        {
            "userId": user_id,
            "type": type,
            "title": title,
            "message": message,
            "read": False,
            "createdAt": utcnow_iso(),
            "actionUrl": action_url,
        },
    )
    logger.debug("NOTIFICATION_CREATED user=%s type=%s", user_id, type)
    return notification_id


def list_notifications(store: DocumentStore, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    return store.query_user(
        Collections.NOTIFICATIONS, user_id, order_by="createdAt", descending=True, limit=limit
    )


def mark_read(store: DocumentStore, user_id: str, ids: Optional[List[str]] = None) -> int:
    """Mark the given notifications (or every unread one) as read; returns the count."""

    if ids:
        targets = [store.get(Collections.NOTIFICATIONS, i) for i in ids]
        targets = [t for t in targets if t and t.get("userId") == user_id]
    else:
        targets = store.query(
            Collections.NOTIFICATIONS, [("userId", "==", user_id), ("read", "==", False)]
        )
    for doc in targets:
        store.update(Collections.NOTIFICATIONS, doc["id"], {"read": True})
    return len(targets)
