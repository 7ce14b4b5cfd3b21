"""Score simulator and statute-of-limitations calculator."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from flask import Blueprint, jsonify

from credit800.api.auth import require_user
from credit800.api.errors import bad_request
from credit800.api.helpers import parse_body
from credit800.api.schemas import SimulateRequest, StatuteRequest
from credit800.core.tools import (
    SCENARIOS,
    STATE_NAMES,
    STATUTE_OF_LIMITATIONS,
    get_credit_report_removal_date,
    is_debt_expired,
    simulate_score_change,
)

tools_bp = Blueprint("tools", __name__, url_prefix="/api/tools")


@tools_bp.get("/scenarios")
@require_user
def list_scenarios() -> Any:
    return jsonify({"scenarios": [asdict(s) for s in SCENARIOS]})


@tools_bp.post("/simulate")
@require_user
def simulate() -> Any:
    body = parse_body(SimulateRequest)
    result = simulate_score_change(body.currentScore, body.scenarioId, body.params)
    return jsonify({"scenarioId": body.scenarioId, "currentScore": body.currentScore, **result})


@tools_bp.post("/statute")
@require_user
def statute() -> Any:
    body = parse_body(StatuteRequest)
    if body.state not in STATUTE_OF_LIMITATIONS:
        raise bad_request("Unknown state", body.state)

    expiry = is_debt_expired(body.state, body.debtType, body.lastActivityDate)
    payload = {
        "state": body.state,
        "stateName": STATE_NAMES.get(body.state, body.state),
        "debtType": body.debtType,
        "years": STATUTE_OF_LIMITATIONS[body.state][body.debtType],
        **expiry.to_dict(),
    }
    if body.firstDelinquencyDate:
        payload["removalDate"] = get_credit_report_removal_date(body.firstDelinquencyDate).isoformat()
    return jsonify(payload)
