"""Action plans, goals, scores, notifications and referrals."""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, jsonify

from credit800.api.auth import require_user
from credit800.api.context import get_store
from credit800.api.errors import ApiError, bad_request, not_found
from credit800.api.helpers import owned_doc, parse_body, user
from credit800.api.schemas import (
    GeneratePlanRequest,
    GoalCreate,
    GoalUpdate,
    NotificationCreate,
    NotificationUpdate,
    PlanStepUpdate,
    ReferralApply,
    ScoreCreate,
)
from credit800.core.analysis import generate_action_plan
from credit800.core.models import Collections, utcnow_iso
from credit800.core.notifications import create_notification, list_notifications, mark_read
from credit800.core.referrals import ReferralError, apply_referral, get_or_create_referral

logger = logging.getLogger(__name__)

tracking_bp = Blueprint("tracking", __name__, url_prefix="/api")


# --- plans ----------------------------------------------------------------
@tracking_bp.get("/plans")
@require_user
def latest_plan() -> Any:
    plans = get_store().query_user(
        Collections.ACTION_PLANS, user().uid, order_by="createdAt", descending=True, limit=1
    )
    return jsonify({"plan": plans[0] if plans else None})


@tracking_bp.post("/plans/generate")
@require_user
def generate_plan() -> Any:
    body = parse_body(GeneratePlanRequest, allow_empty=True)
    if body.reportId:
        owned_doc(Collections.CREDIT_REPORTS, body.reportId, "Report")
    plan = generate_action_plan(get_store(), user().uid, body.reportId)
    return jsonify({"planId": plan["id"], "title": plan["title"], "stepsCount": len(plan["steps"])})


@tracking_bp.patch("/plans/<plan_id>/steps/<int:order>")
@require_user
def update_plan_step(plan_id: str, order: int) -> Any:
    body = parse_body(PlanStepUpdate, allow_empty=True)
    plan = owned_doc(Collections.ACTION_PLANS, plan_id, "Plan")
    steps = [dict(s) for s in plan.get("steps") or []]
    for step in steps:
        if step.get("order") == order:
            step["completed"] = (not step.get("completed")) if body.completed is None else body.completed
            break
    else:
        raise not_found("Step")
    get_store().update(Collections.ACTION_PLANS, plan_id, {"steps": steps, "updatedAt": utcnow_iso()})
    done = sum(1 for s in steps if s.get("completed"))
    return jsonify({"success": True, "steps": steps, "completedCount": done})


# --- goals ----------------------------------------------------------------
@tracking_bp.get("/goals")
@require_user
def list_goals() -> Any:
    goals = get_store().query_user(Collections.GOALS, user().uid, order_by="createdAt")
    return jsonify({"goals": goals})


@tracking_bp.post("/goals")
@require_user
def create_goal() -> Any:
    body = parse_body(GoalCreate)
    now = utcnow_iso()
    data = {
        "userId": user().uid,
        **body.model_dump(),
        "status": "active",
        "isCompleted": False,
        "completedAt": None,
        "createdAt": now,
        "updatedAt": now,
    }
    goal_id = get_store().add(Collections.GOALS, data)
    return jsonify({"id": goal_id})


@tracking_bp.patch("/goals/<goal_id>")
@require_user
def update_goal(goal_id: str) -> Any:
    body = parse_body(GoalUpdate)
    goal = owned_doc(Collections.GOALS, goal_id, "Goal")

    updates: Dict[str, Any] = body.model_dump(exclude_unset=True)
    if "isCompleted" in updates:
        updates["status"] = "completed" if updates["isCompleted"] else "active"
    current = updates.get("current", goal.get("current"))
    target = updates.get("target", goal.get("target"))

    if current is not None and target is not None and current >= target and not goal.get("isCompleted"):
        updates.update(isCompleted=True, status="completed", completedAt=utcnow_iso())
        title = updates.get("title", goal.get("title"))
        create_notification(
            get_store(),
            user().uid,
            "goal_achieved",
            "Goal Achieved!",
            f"You reached your goal: {title}",
            "/goals",
        )
        logger.info("GOAL_ACHIEVED goal=%s user=%s", goal_id, user().uid)

    updates["updatedAt"] = utcnow_iso()
    get_store().update(Collections.GOALS, goal_id, updates)
    return jsonify({"success": True, "goal": {**goal, **updates}})


@tracking_bp.delete("/goals/<goal_id>")
@require_user
def delete_goal(goal_id: str) -> Any:
    owned_doc(Collections.GOALS, goal_id, "Goal")
    get_store().delete(Collections.GOALS, goal_id)
    return jsonify({"success": True})


# --- scores ---------------------------------------------------------------
@tracking_bp.get("/scores")
@require_user
def list_scores() -> Any:
    scores = get_store().query_user(Collections.CREDIT_SCORES, user().uid, order_by="recordedAt")
    return jsonify({"scores": scores})


@tracking_bp.post("/scores")
@require_user
def add_score() -> Any:
    try:
        body = parse_body(ScoreCreate)
    except ApiError as exc:
        raise bad_request("Score must be between 300 and 850", exc.details) from exc
    now = utcnow_iso()
    score_id = get_store().add(
        Collections.CREDIT_SCORES,
        {
            "userId": user().uid,
            "score": body.score,
            "source": body.source,
            "bureau": body.bureau,
            "recordedAt": body.recordedAt or now,
            "factors": body.factors,
            "createdAt": now,
        },
    )
    return jsonify({"id": score_id, "score": body.score})


# --- notifications --------------------------------------------------------
@tracking_bp.get("/notifications")
@require_user
def get_notifications() -> Any:
    notifications = list_notifications(get_store(), user().uid)
    unread = sum(1 for n in notifications if not n.get("read"))
    return jsonify({"notifications": notifications, "unreadCount": unread})


@tracking_bp.post("/notifications")
@require_user
def post_notification() -> Any:
    body = parse_body(NotificationCreate)
    notification_id = create_notification(
        get_store(), user().uid, body.type, body.title, body.message, body.actionUrl
    )
    return jsonify({"id": notification_id})


@tracking_bp.patch("/notifications")
@require_user
def patch_notifications() -> Any:
    body = parse_body(NotificationUpdate, allow_empty=True)
    store = get_store()
    if body.notificationId:
        owned_doc(Collections.NOTIFICATIONS, body.notificationId, "Notification")
        store.update(Collections.NOTIFICATIONS, body.notificationId, {"read": body.read})
        return jsonify({"success": True, "updated": 1})
    count = mark_read(store, user().uid, body.ids)
    return jsonify({"success": True, "updated": count})


# --- referrals ------------------------------------------------------------
@tracking_bp.get("/referrals")
@require_user
def get_referral() -> Any:
    return jsonify({"referral": get_or_create_referral(get_store(), user().uid)})


@tracking_bp.post("/referrals")
@require_user
def use_referral() -> Any:
    body = parse_body(ReferralApply)
    try:
        result = apply_referral(get_store(), body.referralCode.upper(), user().uid)
    except ReferralError as exc:
        raise ApiError(exc.status, str(exc)) from exc
    return jsonify(result)
