"""Translate carrier delivery states into :class:`MailStatus` values."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from credit800.core.models import MailStatus

_POSTGRID_STATUS = {
    "delivered": MailStatus.DELIVERED,
    "returned_to_sender": MailStatus.RETURNED,
    "re-routed": MailStatus.RE_ROUTED,
    "in_local_area": MailStatus.OUT_FOR_DELIVERY,
    "processed_for_delivery": MailStatus.OUT_FOR_DELIVERY,
    "in_transit": MailStatus.IN_TRANSIT,
    "printing": MailStatus.IN_TRANSIT,
}

_TRACKING_EVENT_STATUS = {
    "Delivered": MailStatus.DELIVERED,
    "Returned to Sender": MailStatus.RETURNED,
    "Re-Routed": MailStatus.RE_ROUTED,
    "Processed for Delivery": MailStatus.OUT_FOR_DELIVERY,
    "In Local Area": MailStatus.OUT_FOR_DELIVERY,
    "In Transit": MailStatus.IN_TRANSIT,
    "Mailed": MailStatus.IN_TRANSIT,
}


def normalize_click2mail_status(raw_status: str) -> str:
    status = (raw_status or "").upper()
    if status == "MAILED":
        return MailStatus.MAILED
    if status in {"IN_PRODUCTION", "AWAITING_PRODUCTION"}:
        return MailStatus.IN_PRODUCTION
    if status == "ERROR":
        return MailStatus.ERROR
    return MailStatus.SUBMITTED


def status_from_tracking_events(events: Iterable[Mapping[str, Any]]) -> str | None:
    events = list(events)
    if not events:
        return None
    return _TRACKING_EVENT_STATUS.get(str(events[-1].get("name") or ""))


def derive_postgrid_status(raw_status: str, tracking_events: Iterable[Mapping[str, Any]]) -> str:
    mapped = _POSTGRID_STATUS.get(raw_status or "")
    if mapped:
        return mapped
    return status_from_tracking_events(tracking_events) or MailStatus.SUBMITTED


def normalize_lob_status(tracking_events: Iterable[Mapping[str, Any]]) -> str:
    """Lob letters carry no status field; tracking events drive the state."""

    return status_from_tracking_events(tracking_events) or MailStatus.SUBMITTED
