"""Physical mail endpoints: dispute letters and CFPB complaints."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from flask import Blueprint, jsonify

from credit800.api.auth import require_user
from credit800.api.context import default_mail_provider, get_carrier, get_smtp, get_store
from credit800.api.errors import ApiError, bad_request
from credit800.api.helpers import owned_doc, parse_body, require_arg, user
from credit800.api.schemas import CfpbMailRequest, MailDisputeRequest, RefreshMailRequest
from credit800.core.addresses import CFPB_ADDRESS
from credit800.core.mail import MailAddress, MailCarrierError
from credit800.core.mail.dispatch import in_flight_disputes, mail_dispute, refresh_mail_status
from credit800.core.models import Collections

logger = logging.getLogger(__name__)

mail_bp = Blueprint("mail", __name__)


def _sender_address() -> MailAddress:
    profile = get_store().get(Collections.USERS, user().uid) or {}
    return MailAddress.from_profile(profile)


@mail_bp.post("/api/disputes/mail")
@require_user
def send_dispute_letter() -> Any:
    body = parse_body(MailDisputeRequest)
    dispute = owned_doc(Collections.DISPUTES, body.disputeId, "Dispute")

    if not dispute.get("letterContent"):
        raise bad_request("Dispute has no letter content")
    creditor_address = dispute.get("creditorAddress") or {}
    if not creditor_address.get("address"):
        raise bad_request(
            "No creditor address available",
            "Delete and re-generate this dispute to look up the address.",
        )
    if dispute.get("mailJobId"):
        raise ApiError(409, "This dispute letter has already been mailed", mailJobId=dispute["mailJobId"])

    provider = body.provider or default_mail_provider()
    sender = _sender_address()
    if provider != "click2mail" and not (sender.name and sender.address_line1 and sender.zip):
        raise bad_request("Complete your profile address before mailing")
    carrier = get_carrier(provider)

    try:
        receipt = mail_dispute(
            get_store(), dispute, carrier, sender, email=user().email, smtp=get_smtp()
        )
    except MailCarrierError as exc:
        raise ApiError(500, "Failed to mail letter", str(exc)) from exc

    return jsonify(
        {
            "success": True,
            "provider": receipt.provider,
            "mailJobId": receipt.job_id,
            "mailStatus": receipt.status,
            "expectedDelivery": receipt.expected_delivery,
        }
    )


@mail_bp.get("/api/disputes/mail/status")
@require_user
def dispute_mail_status() -> Any:
    dispute_id = require_arg("disputeId")
    dispute = owned_doc(Collections.DISPUTES, dispute_id, "Dispute")
    if not dispute.get("mailJobId"):
        raise bad_request("This dispute has not been mailed")

    carrier = get_carrier(dispute.get("mailProvider"))
    try:
        return jsonify(refresh_mail_status(get_store(), dispute, carrier))
    except (MailCarrierError, httpx.HTTPError) as exc:
        logger.exception("MAIL_STATUS_FAILED dispute=%s", dispute_id)
        raise ApiError(500, "Failed to check mail status", str(exc)) from exc


@mail_bp.post("/api/disputes/mail/refresh")
@require_user
def refresh_mail() -> Any:
    body = parse_body(RefreshMailRequest, allow_empty=True)
    store = get_store()
    if body.disputeId:
        dispute = owned_doc(Collections.DISPUTES, body.disputeId, "Dispute")
        if not dispute.get("mailJobId"):
            raise bad_request("Dispute has not been mailed")
        targets = [dispute]
    else:
        targets = in_flight_disputes(store, user().uid)

    results = []
    failed = 0
    for dispute in targets:
        try:
            carrier = get_carrier(dispute.get("mailProvider"))
            results.append(refresh_mail_status(store, dispute, carrier))
        except (MailCarrierError, httpx.HTTPError) as exc:
            failed += 1
            logger.warning("MAIL_REFRESH_FAILED dispute=%s error=%s", dispute["id"], exc)
        except ApiError as exc:
            if body.disputeId or exc.status != 503:
                raise
            failed += 1
            logger.warning(
                "MAIL_REFRESH_SKIPPED dispute=%s provider=%s error=%s",
                dispute["id"],
                dispute.get("mailProvider"),
                exc.details,
            )
    if body.disputeId and failed:
        raise ApiError(500, "Failed to refresh tracking")
    return jsonify({"checked": len(targets), "updated": len(results), "failed": failed, "disputes": results})


@mail_bp.post("/api/cfpb/mail")
@require_user
def mail_cfpb_complaint() -> Any:
    carrier = get_carrier("postgrid")
    body = parse_body(CfpbMailRequest)
    sender = MailAddress(
        name=body.fromAddress.name,
        address_line1=body.fromAddress.address_line1,
        address_line2=body.fromAddress.address_line2,
        city=body.fromAddress.address_city,
        state=body.fromAddress.address_state,
        zip=body.fromAddress.address_zip,
    )
    try:
        receipt = carrier.send_letter(
            to=MailAddress.from_creditor(CFPB_ADDRESS),
            sender=sender,
            text=body.complaintText,
            description="CFPB Complaint Letter",
        )
    except (MailCarrierError, httpx.HTTPError) as exc:
        logger.error("CFPB_MAIL_FAILED user=%s error=%s", user().uid, exc)
        raise ApiError(500, "Failed to mail complaint", str(exc)) from exc
    logger.info("CFPB_COMPLAINT_MAILED user=%s job=%s", user().uid, receipt.job_id)
    return jsonify(
        {"success": True, "mailJobId": receipt.job_id, "expectedDelivery": receipt.expected_delivery}
    )
