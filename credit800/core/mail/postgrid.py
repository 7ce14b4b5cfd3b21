from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from credit800.core.letters.rendering import letter_to_html
from credit800.core.mail.base import (
    CarrierNotConfigured,
    CarrierStatus,
    MailAddress,
    MailCarrier,
    MailReceipt,
)
from credit800.core.mail.status import derive_postgrid_status

logger = logging.getLogger(__name__)

POSTGRID_BASE = "https://api.postgrid.com/print-mail/v1"


def to_postgrid_address(addr: MailAddress) -> Dict[str, str]:
    first, last = addr.split_name()
    return {
        "firstName": first,
        "lastName": last,
        "addressLine1": addr.address_line1,
        "addressLine2": addr.address_line2 or "",
        "city": addr.city,
        "provinceOrState": addr.state,
        "postalOrZip": addr.zip,
        "countryCode": "US",
    }


def normalize_letter(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map a PostGrid letter payload onto the snake_case shape used internally."""

    events = [
        {
            "id": e.get("id", ""),
            "type": e.get("type", ""),
            "name": e.get("name", ""),
            "date_created": e.get("datetime") or e.get("date_created") or "",
            "location": e.get("location"),
        }
        for e in data.get("trackingEvents") or []
    ]
    return {
        "id": data.get("id"),
        "description": data.get("description"),
        "url": data.get("url"),
        "status": data.get("status") or "ready",
        "tracking_events": events,
        "expected_delivery_date": data.get("expectedDeliveryDate") or data.get("expected_delivery_date"),
        "send_date": data.get("sendDate") or data.get("send_date"),
        "date_created": data.get("createdAt") or data.get("date_created") or "",
    }


class PostGridClient(MailCarrier):
    name = "postgrid"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = POSTGRID_BASE,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not api_key:
            raise CarrierNotConfigured("POSTGRID_API_KEY environment variable is not configured")
        super().__init__(base_url=base_url, headers={"x-api-key": api_key}, transport=transport)

    def send_letter(
        self,
        *,
        to: MailAddress,
        sender: MailAddress,
        text: str,
        description: str = "Credit dispute letter",
    ) -> MailReceipt:
        payload = {
            "to": to_postgrid_address(to),
            "from": to_postgrid_address(sender),
            "html": letter_to_html(text, font_size="10.5px", margin="0.75in"),
            "description": description,
            "color": False,
            "doubleSided": False,
            "mailingClass": "first_class",
        }
        resp = self._http.post("/letters", json=payload)
        if resp.status_code >= 400:
            raise self._error("send letter", resp)
        letter = normalize_letter(resp.json())
        logger.info("POSTGRID_LETTER_CREATED id=%s status=%s", letter["id"], letter["status"])
        return MailReceipt(
            provider=self.name,
            job_id=str(letter["id"]),
            status=derive_postgrid_status(letter["status"], letter["tracking_events"]),
            expected_delivery=letter["expected_delivery_date"],
        )

    def get_status(self, job_id: str) -> CarrierStatus:
        resp = self._http.get(f"/letters/{job_id}")
        if resp.status_code >= 400:
            raise self._error("get letter", resp)
        letter = normalize_letter(resp.json())
        events = letter["tracking_events"]
        latest = events[-1] if events else None
        return CarrierStatus(
            status=derive_postgrid_status(letter["status"], events),
            raw_status=letter["status"],
            description=letter["description"],
            tracking={
                "status": latest["name"] if latest else letter["status"],
                "lastUpdate": latest["date_created"] if latest else None,
                "trackingNumber": None,
            },
            expected_delivery=letter["expected_delivery_date"],
            events=events,
        )
