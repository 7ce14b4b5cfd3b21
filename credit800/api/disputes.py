"""Dispute letters: generation, escalation, bureau responses and deletion."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import anthropic
from flask import Blueprint, jsonify, request

from credit800.api.auth import require_user
from credit800.api.context import get_claude, get_resolver, get_store
from credit800.api.errors import ApiError, bad_request
from credit800.api.helpers import owned_doc, parse_body, user
from credit800.api.schemas import (
    DisputeResponseRequest,
    EscalateDisputeRequest,
    GenerateDisputeRequest,
    ParseResponseTextRequest,
)
from credit800.core.addresses import CreditorAddress, format_address_lines, get_bureau_address
from credit800.core.analysis.response_parser import (
    ResponseParseError,
    parse_bureau_response,
    parse_bureau_response_text,
)
from credit800.core.letters import (
    LetterParams,
    format_letter_date,
    format_money,
    get_escalation_template,
    select_template,
)
from credit800.core.models import Collections, Dispute, DisputeStatus, utcnow_iso
from credit800.core.notifications import create_notification
from credit800.core.services.claude_client import ClaudeAPIError

logger = logging.getLogger(__name__)

disputes_bp = Blueprint("disputes", __name__, url_prefix="/api/disputes")

DEFAULT_REASON = "Information is inaccurate or unverifiable"
ADDRESS_PLACEHOLDER = "[Your Address]\n[City, State ZIP]"


def _profile() -> Dict[str, Any]:
    return get_store().get(Collections.USERS, user().uid) or {}


def consumer_address_block(profile: Dict[str, Any]) -> str:
    if not profile.get("fullName") or not profile.get("address"):
        return ADDRESS_PLACEHOLDER
    lines = [profile["address"]]
    if profile.get("address2"):
        lines.append(profile["address2"])
    lines.append(f"{profile.get('city', '')}, {profile.get('state', '')} {profile.get('zip', '')}")
    return "\n".join(lines)


def _recipient(item: Dict[str, Any], to_bureau: bool) -> Optional[CreditorAddress]:
    if to_bureau:
        return get_bureau_address(str(item.get("bureau") or ""))
    return get_resolver().resolve(str(item.get("creditorName") or ""))


def _display_date(iso_value: Any) -> str:
    if not iso_value:
        return "Unknown"
    try:
        parsed = datetime.fromisoformat(str(iso_value).replace("Z", "+00:00"))
    except ValueError:
        return "Unknown"
    return format_letter_date(parsed.date())


@disputes_bp.get("")
@require_user
def list_disputes() -> Any:
    disputes = get_store().query_user(
        Collections.DISPUTES, user().uid, order_by="createdAt", descending=True
    )
    return jsonify({"disputes": disputes})


@disputes_bp.post("/generate")
@require_user
def generate_dispute() -> Any:
    body = parse_body(GenerateDisputeRequest)
    item = owned_doc(Collections.REPORT_ITEMS, body.reportItemId, "Report item")
    store = get_store()
    if item.get("disputeId") and store.get(Collections.DISPUTES, item["disputeId"]):
        raise ApiError(409, "A dispute already exists for this item", disputeId=item["disputeId"])

    profile = _profile()
    decision = select_template(item, body.templateId)
    template = decision.template
    address = _recipient(item, template.addressed_to_bureau)
    reason = body.reason or item.get("disputeReason") or DEFAULT_REASON
    balance = item.get("balance")

    params = LetterParams(
        consumer_name=profile.get("fullName") or user().display_name,
        address=profile.get("address", ""),
        city=profile.get("city", ""),
        state=profile.get("state", ""),
        zip=profile.get("zip", ""),
        creditor_name=str(item.get("creditorName") or "Unknown Creditor"),
        account_number=str(item.get("accountNumber") or "Unknown"),
        bureau=item.get("bureau"),
        reason=reason,
        balance_display=format_money(balance) if balance is not None else None,
        recipient_lines=format_address_lines(address) if address else [],
    )
    letter = template.generate(params)

    dispute = Dispute(
        user_id=user().uid,
        report_item_id=item["id"],
        creditor_name=params.creditor_name,
        account_number=params.account_number,
        bureau=str(item.get("bureau") or ""),
        reason=reason,
        letter_content=letter,
        template_id=template.id,
        creditor_address=address.to_dict() if address else None,
    )
    data = dispute.to_dict()
    data["updatedAt"] = data["createdAt"]
    dispute_id = store.add(Collections.DISPUTES, data)
    store.update(
        Collections.REPORT_ITEMS,
        item["id"],
        {"isDisputable": False, "disputeStatus": DisputeStatus.DRAFT, "disputeId": dispute_id},
    )
    logger.info(
        "DISPUTE_GENERATED dispute=%s template=%s route=%s address_source=%s",
        dispute_id,
        template.id,
        decision.router_reason,
        address.source if address else None,
    )
    return jsonify(
        {
            "disputeId": dispute_id,
            "templateId": template.id,
            "letterContent": letter,
            "creditorAddress": data["creditorAddress"],
        }
    )


@disputes_bp.post("/escalate")
@require_user
def escalate_dispute() -> Any:
    body = parse_body(EscalateDisputeRequest)
    template = get_escalation_template(body.round)
    if template is None:
        raise bad_request("Invalid escalation round", "round must be 2 or 3")
    original = owned_doc(Collections.DISPUTES, body.disputeId, "Dispute")
    if original.get("escalatedToId"):
        raise ApiError(409, "Dispute has already been escalated", escalatedToId=original["escalatedToId"])

    profile = _profile()
    letter = template.generate_letter(
        creditor_name=original.get("creditorName") or "Unknown Creditor",
        bureau=original.get("bureau") or "Credit Bureau",
        account_number=original.get("accountNumber") or "Unknown",
        original_dispute_date=_display_date(original.get("createdAt")),
        reason=original.get("reason") or "Inaccurate information",
        consumer_name=profile.get("fullName") or user().display_name,
        consumer_address=consumer_address_block(profile),
    )

    escalation = Dispute(
        user_id=user().uid,
        report_item_id=original.get("reportItemId"),
        creditor_name=original.get("creditorName") or "",
        account_number=original.get("accountNumber") or "",
        bureau=original.get("bureau") or "",
        reason=f"[Round {body.round}] {template.title}",
        letter_content=letter,
        template_id=f"escalation-round-{body.round}",
        creditor_address=original.get("creditorAddress"),
        escalation_round=body.round,
        original_dispute_id=original["id"],
    )
    data = escalation.to_dict()
    data["updatedAt"] = data["createdAt"]
    store = get_store()
    new_id = store.add(Collections.DISPUTES, data)
    store.update(
        Collections.DISPUTES,
        original["id"],
        {"escalatedToId": new_id, "escalationRound": body.round, "updatedAt": utcnow_iso()},
    )
    logger.info("DISPUTE_ESCALATED original=%s new=%s round=%d", original["id"], new_id, body.round)
    return jsonify({"disputeId": new_id, "letterContent": letter})


@disputes_bp.patch("/<dispute_id>/response")
@require_user
def record_response(dispute_id: str) -> Any:
    body = parse_body(DisputeResponseRequest)
    dispute = owned_doc(Collections.DISPUTES, dispute_id, "Dispute")

    now = utcnow_iso()
    updates: Dict[str, Any] = {
        "bureauResponse": body.notes,
        "bureauResponseOutcome": body.outcome,
        "responseReceivedAt": body.responseReceivedAt or now,
        "updatedAt": now,
    }
    if body.outcome == "deleted":
        updates["status"] = DisputeStatus.RESOLVED
        updates["resolvedAt"] = now
        if dispute.get("reportItemId"):
            item = get_store().get(Collections.REPORT_ITEMS, dispute["reportItemId"])
            if item is not None:
                get_store().update(
                    Collections.REPORT_ITEMS, item["id"], {"disputeStatus": DisputeStatus.RESOLVED}
                )
    get_store().update(Collections.DISPUTES, dispute_id, updates)

    if body.outcome:
        create_notification(
            get_store(),
            user().uid,
            "dispute_response",
            "Bureau response recorded",
            f"{dispute.get('creditorName') or 'Your dispute'}: {body.outcome.replace('_', ' ')}.",
            "/disputes",
        )
    logger.info("DISPUTE_RESPONSE_RECORDED dispute=%s outcome=%s", dispute_id, body.outcome)
    return jsonify({"updated": True, "updates": updates})


@disputes_bp.post("/parse-response")
@require_user
def parse_response() -> Any:
    upload = request.files.get("file")
    try:
        if upload is not None and upload.filename:
            data = upload.read()
            if not data:
                raise bad_request("Uploaded file is empty")
            claude = get_claude()
            parsed = parse_bureau_response(
                claude, data, filename=upload.filename, content_type=upload.mimetype
            )
        else:
            body = parse_body(ParseResponseTextRequest)
            parsed = parse_bureau_response_text(get_claude(), body.text)
    except (ClaudeAPIError, ResponseParseError, anthropic.APIError) as exc:
        logger.exception("BUREAU_RESPONSE_PARSE_FAILED user=%s", user().uid)
        raise ApiError(500, "Failed to parse response", str(exc)) from exc
    return jsonify(parsed)


@disputes_bp.delete("/<dispute_id>")
@require_user
def delete_dispute(dispute_id: str) -> Any:
    dispute = owned_doc(Collections.DISPUTES, dispute_id, "Dispute")
    if dispute.get("status") != DisputeStatus.DRAFT or dispute.get("mailJobId"):
        raise ApiError(409, "Only draft disputes can be deleted")

    store = get_store()
    store.delete(Collections.DISPUTES, dispute_id)
    original_id = dispute.get("originalDisputeId")
    if original_id:
        original = store.get(Collections.DISPUTES, original_id)
        if original is not None and original.get("escalatedToId") == dispute_id:
            store.update(Collections.DISPUTES, original_id, {"escalatedToId": None})
    item_id = dispute.get("reportItemId")
    if item_id and not original_id:
        item = store.get(Collections.REPORT_ITEMS, item_id)
        if item is not None and item.get("disputeId") == dispute_id:
            store.update(
                Collections.REPORT_ITEMS,
                item_id,
                {"isDisputable": True, "disputeStatus": None, "disputeId": None},
            )
    logger.info("DISPUTE_DELETED dispute=%s", dispute_id)
    return jsonify({"success": True})
