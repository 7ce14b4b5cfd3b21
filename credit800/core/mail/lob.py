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
from credit800.core.mail.status import normalize_lob_status

logger = logging.getLogger(__name__)

LOB_BASE = "https://api.lob.com/v1"


def _lob_address(addr: MailAddress) -> Dict[str, str]:
    data = {
        "name": addr.name,
        "address_line1": addr.address_line1,
        "address_city": addr.city,
        "address_state": addr.state,
        "address_zip": addr.zip,
    }
    if addr.address_line2:
        data["address_line2"] = addr.address_line2
    return data


class LobClient(MailCarrier):
    name = "lob"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = LOB_BASE,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not api_key:
            raise CarrierNotConfigured("LOB_API_KEY environment variable is not configured")
        # Lob uses the API key as the basic-auth username with an empty password
        super().__init__(base_url=base_url, auth=(api_key, ""), transport=transport)

    def send_letter(
        self,
        *,
        to: MailAddress,
        sender: MailAddress,
        text: str,
        description: str = "Credit dispute letter",
    ) -> MailReceipt:
        payload = {
            "to": _lob_address(to),
            "from": _lob_address(sender),
            "file": letter_to_html(text),
            "color": False,
            "double_sided": False,
            "address_placement": "insert_blank_page",
            "mail_type": "usps_first_class",
            "use_type": "operational",
            "description": description,
        }
        resp = self._http.post("/letters", json=payload)
        if resp.status_code >= 400:
            raise self._error("send letter", resp)
        data: Dict[str, Any] = resp.json()
        logger.info("LOB_LETTER_CREATED id=%s", data.get("id"))
        return MailReceipt(
            provider=self.name,
            job_id=str(data["id"]),
            status=normalize_lob_status(data.get("tracking_events") or []),
            expected_delivery=data.get("expected_delivery_date"),
        )

    def get_status(self, job_id: str) -> CarrierStatus:
        resp = self._http.get(f"/letters/{job_id}")
        if resp.status_code >= 400:
            raise self._error("get letter", resp)
        data = resp.json()
        events = data.get("tracking_events") or []
        latest = events[-1] if events else None
        return CarrierStatus(
            status=normalize_lob_status(events),
            raw_status=str(latest.get("name")) if latest else "created",
            description=data.get("description"),
            tracking={
                "status": latest.get("name") if latest else None,
                "lastUpdate": latest.get("date_created") if latest else None,
                "trackingNumber": data.get("tracking_number"),
            },
            expected_delivery=data.get("expected_delivery_date"),
            events=events,
        )
