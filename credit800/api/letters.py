"""Letter catalogue and previews."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from credit800.api.auth import require_user
from credit800.api.context import get_store
from credit800.api.disputes import consumer_address_block
from credit800.api.errors import bad_request, not_found
from credit800.api.helpers import owned_doc, parse_body, user
from credit800.api.schemas import CfpbLetterRequest, LetterPreviewRequest
from credit800.core.letters import (
    COMPLAINT_TYPES,
    ESCALATION_TEMPLATES,
    TEMPLATE_CATEGORIES,
    LetterParams,
    generate_complaint_letter,
    get_complaint_type,
    get_template_by_id,
    letter_to_html,
    templates_for_category,
)
from credit800.core.models import Collections

letters_bp = Blueprint("letters", __name__, url_prefix="/api/letters")


@letters_bp.get("/templates")
@require_user
def list_templates() -> Any:
    category = request.args.get("category")
    return jsonify(
        {
            "categories": TEMPLATE_CATEGORIES,
            "templates": [t.to_dict() for t in templates_for_category(category)],
            "escalations": [
                {"round": t.round, "title": t.title, "description": t.description}
                for t in ESCALATION_TEMPLATES
            ],
            "complaintTypes": [c.to_dict() for c in COMPLAINT_TYPES],
        }
    )


@letters_bp.post("/preview")
@require_user
def preview_letter() -> Any:
    body = parse_body(LetterPreviewRequest)
    template = get_template_by_id(body.templateId)
    if template is None:
        raise not_found("Template")
    params = LetterParams.from_dict(body.model_dump())
    letter = template.generate(params)
    if body.format == "html":
        return jsonify({"templateId": template.id, "html": letter_to_html(letter)})
    return jsonify({"templateId": template.id, "letterContent": letter})


@letters_bp.post("/cfpb")
@require_user
def cfpb_letter() -> Any:
    body = parse_body(CfpbLetterRequest)
    complaint = get_complaint_type(body.complaintType)
    if complaint is None:
        raise bad_request("Unknown complaint type")
    dispute = owned_doc(Collections.DISPUTES, body.disputeId, "Dispute")
    profile = get_store().get(Collections.USERS, user().uid) or {}
    letter = generate_complaint_letter(
        complaint,
        creditor_name=dispute.get("creditorName") or "Unknown Creditor",
        bureau=dispute.get("bureau") or "Credit Bureau",
        account_number=dispute.get("accountNumber") or "Unknown",
        reason=dispute.get("reason") or "Inaccurate information",
        consumer_name=profile.get("fullName") or user().display_name,
        consumer_address=consumer_address_block(profile),
        original_dispute_date=(dispute.get("createdAt") or "")[:10] or None,
        additional_details=body.additionalDetails,
    )
    return jsonify({"complaintType": complaint.id, "letterContent": letter})
