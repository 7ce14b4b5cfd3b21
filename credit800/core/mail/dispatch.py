"""Mailing a dispute letter and keeping its delivery status current."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from credit800.core.addresses import CreditorAddress
from credit800.core.emailing import SmtpConfig, send_dispute_mailed_email
from credit800.core.mail.base import CarrierStatus, MailAddress, MailCarrier, MailCarrierError, MailReceipt
from credit800.core.models import Collections, DisputeStatus, MailStatus, utcnow_iso
from credit800.core.notifications import create_notification
from credit800.core.store import DocumentStore

logger = logging.getLogger(__name__)


def is_in_flight(dispute: Dict[str, Any]) -> bool:
    return bool(dispute.get("mailJobId")) and dispute.get("mailStatus") not in MailStatus.FINAL


def recipient_for(dispute: Dict[str, Any]) -> MailAddress:
    creditor = CreditorAddress.from_dict(dispute.get("creditorAddress") or {})
    address = MailAddress.from_creditor(creditor)
    if not address.name:
        address.name = address.organization = dispute.get("creditorName") or "Dispute Department"
    return address


def mail_dispute(
    store: DocumentStore,
    dispute: Dict[str, Any],
    carrier: MailCarrier,
    sender: MailAddress,
    *,
    email: Optional[str] = None,
    smtp: Optional[SmtpConfig] = None,
) -> MailReceipt:
    """Send the dispute's letter through ``carrier`` and record the outcome.

    Failures are stored on the dispute (``mailStatus=ERROR``, ``mailError``) and
    re-raised as :class:`MailCarrierError`.
    """

    dispute_id = dispute["id"]
    try:
        receipt = carrier.send_letter(
            to=recipient_for(dispute),
            sender=sender,
            text=dispute["letterContent"],
            description=f"Dispute letter - {dispute.get('creditorName') or 'creditor'}",
        )
    except (MailCarrierError, httpx.HTTPError, OSError) as exc:
        logger.error("DISPUTE_MAIL_FAILED dispute=%s carrier=%s error=%s", dispute_id, carrier.name, exc)
        store.update(
            Collections.DISPUTES,
            dispute_id,
            {"mailStatus": MailStatus.ERROR, "mailError": str(exc), "updatedAt": utcnow_iso()},
        )
        if isinstance(exc, MailCarrierError):
            raise
        raise MailCarrierError(str(exc)) from exc

    now = utcnow_iso()
    store.update(
        Collections.DISPUTES,
        dispute_id,
        {
            "mailProvider": receipt.provider,
            "mailJobId": receipt.job_id,
            "mailDocumentId": receipt.document_id,
            "mailAddressId": receipt.address_id,
            "mailStatus": receipt.status,
            "mailError": None,
            "expectedDelivery": receipt.expected_delivery,
            "mailedAt": now,
            "status": DisputeStatus.SENT,
            "updatedAt": now,
        },
    )
    item_id = dispute.get("reportItemId")
    if item_id and store.get(Collections.REPORT_ITEMS, item_id) is not None:
        store.update(Collections.REPORT_ITEMS, item_id, {"disputeStatus": DisputeStatus.SENT})

    creditor_name = dispute.get("creditorName") or "the creditor"
    create_notification(
        store,
        dispute["userId"],
        "dispute_mailed",
        "Dispute letter mailed",
        f"Your dispute letter to {creditor_name} is on its way.",
        "/disputes",
    )
    if smtp is not None and email:
        send_dispute_mailed_email(smtp, email, sender.name or None, creditor_name, receipt.expected_delivery)
    logger.info("DISPUTE_MAILED dispute=%s carrier=%s job=%s", dispute_id, receipt.provider, receipt.job_id)
    return receipt


def apply_status(store: DocumentStore, dispute_id: str, status: CarrierStatus) -> Dict[str, Any]:
    updates: Dict[str, Any] = {"mailStatus": status.status, "updatedAt": utcnow_iso()}
    if status.tracking is not None:
        updates["mailTracking"] = status.tracking
    if status.expected_delivery:
        updates["expectedDelivery"] = status.expected_delivery
    store.update(Collections.DISPUTES, dispute_id, updates)
    return updates


def refresh_mail_status(store: DocumentStore, dispute: Dict[str, Any], carrier: MailCarrier) -> Dict[str, Any]:
    status = carrier.get_status(dispute["mailJobId"])
    apply_status(store, dispute["id"], status)
    logger.info(
        "DISPUTE_MAIL_STATUS dispute=%s carrier=%s raw=%s status=%s",
        dispute["id"],
        carrier.name,
        status.raw_status,
        status.status,
    )
    return {
        "disputeId": dispute["id"],
        "mailJobId": dispute["mailJobId"],
        "mailStatus": status.status,
        "carrierStatus": status.raw_status,
        "description": status.description,
        "mailTracking": status.tracking,
        "expectedDelivery": status.expected_delivery,
    }


def in_flight_disputes(store: DocumentStore, user_id: str) -> List[Dict[str, Any]]:
    return [d for d in store.query_user(Collections.DISPUTES, user_id) if is_in_flight(d)]
