"""Click2Mail MOL Pro client.

Mailing a letter takes four calls: upload the PDF, upload a one-row address
list (then wait for CASS standardization), create a job linking the two, and
submit the job.
"""

from __future__ import annotations

import logging
import re
import time
import xml.etree.ElementTree as ET
from typing import Callable, Dict, Optional
from xml.sax.saxutils import escape

import httpx

from credit800.core.mail.base import (
    CarrierNotConfigured,
    CarrierStatus,
    MailAddress,
    MailCarrier,
    MailCarrierError,
    MailReceipt,
)
from credit800.core.mail.status import normalize_click2mail_status
from credit800.core.models import MailStatus

logger = logging.getLogger(__name__)

STAGING_BASE = "https://stage-rest.click2mail.com/molpro"
PRODUCTION_BASE = "https://rest.click2mail.com/molpro"

CASS_READY_STATUS = 5
CASS_MAX_ATTEMPTS = 15
CASS_POLL_SECONDS = 2.0

JOB_OPTIONS = {
    "documentClass": "Letter 8.5 x 11",
    "layout": "Address on Separate Page",
    "productionTime": "Next Day",
    "envelope": "#10 Single Window",
    "color": "Black and White",
    "paperType": "White 24#",
    "printOption": "Simplex",
}

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}
_UNSAFE_NAME_RE = re.compile(r"[^a-zA-Z0-9]")


def _xml(value: str) -> str:
    return escape(value or "", _XML_ENTITIES)


def _parse(text: str) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise MailCarrierError(f"click2mail returned malformed XML: {text[:200]}") from exc


def _child_text(root: ET.Element, tag: str) -> Optional[str]:
    if root.tag == tag:
        node = root
    else:
        node = root.find(f".//{tag}")
    if node is None:
        return None
    return (node.text or "").strip() or None


def build_address_list_xml(address: MailAddress, list_name: str) -> str:
    first, last = ("", "") if address.organization else address.split_name()
    return f"""<addressList>
  <addressListName>{_xml(list_name)}</addressListName>
  <addressMappingId>1</addressMappingId>
  <addresses>
    <address>
      <Firstname>{_xml(first)}</Firstname>
      <Lastname>{_xml(last)}</Lastname>
      <Organization>{_xml(address.organization or address.name)}</Organization>
      <Address1>{_xml(address.address_line1)}</Address1>
      <Address2>{_xml(address.address_line2)}</Address2>
      <Address3></Address3>
      <City>{_xml(address.city)}</City>
      <State>{_xml(address.state)}</State>
      <Postalcode>{_xml(address.zip)}</Postalcode>
      <Country>US</Country>
    </address>
  </addresses>
</addressList>"""


def document_name_for(creditor_name: str, timestamp_ms: Optional[int] = None) -> str:
    ts = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    safe = _UNSAFE_NAME_RE.sub("-", creditor_name or "")[:30]
    return f"dispute-{safe}-{ts}"


class Click2MailClient(MailCarrier):
    name = "click2mail"

    def __init__(
        self,
        username: str,
        password: str,
        *,
        staging: bool = False,
        pdf_renderer: Callable[[str], bytes],
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not username or not password:
            raise CarrierNotConfigured(
                "Click2Mail credentials not configured (CLICK2MAIL_USERNAME, CLICK2MAIL_PASSWORD)"
            )
        super().__init__(
            base_url=STAGING_BASE if staging else PRODUCTION_BASE,
            headers={"Accept": "application/xml"},
            auth=(username, password),
            transport=transport,
        )
        self._render_pdf = pdf_renderer
        self._sleep = sleep

    # --- individual API calls ---------------------------------------------
    def upload_document(self, pdf: bytes, document_name: str) -> str:
        resp = self._http.post(
            "/documents",
            data={
                "documentName": document_name,
                "documentFormat": "pdf",
                "documentClass": JOB_OPTIONS["documentClass"],
            },
            files={"file": (f"{document_name}.pdf", pdf, "application/pdf")},
        )
        if resp.status_code >= 400:
            raise self._error("document upload", resp)
        doc_id = _child_text(_parse(resp.text), "id")
        if not doc_id:
            raise MailCarrierError(f"click2mail document upload returned unexpected response: {resp.text}")
        return doc_id

    def upload_address_list(self, address: MailAddress) -> str:
        body = build_address_list_xml(address, f"Dispute-{int(time.time() * 1000)}")
        resp = self._http.post(
            "/addressLists",
            content=body.encode("utf-8"),
            headers={"Content-Type": "application/xml"},
        )
        if resp.status_code >= 400:
            raise self._error("address upload", resp)
        address_id = _child_text(_parse(resp.text), "id")
        if not address_id:
            raise MailCarrierError(f"click2mail address upload returned unexpected response: {resp.text}")
        self.wait_for_address_validation(address_id)
        return address_id

    def wait_for_address_validation(self, address_id: str) -> None:
        """Poll until the list reaches CASS status 5; statuses outside 0..10 are failures."""

        for attempt in range(CASS_MAX_ATTEMPTS):
            resp = self._http.get(f"/addressLists/{address_id}")
            status_text = _child_text(_parse(resp.text), "status") if resp.text else None
            try:
                status = int(status_text) if status_text is not None else -1
            except ValueError:
                status = -1

            if status == CASS_READY_STATUS:
                logger.info("CLICK2MAIL_CASS_READY address_list=%s attempts=%d", address_id, attempt + 1)
                return
            if status < 0 or status > 10:
                raise MailCarrierError(
                    f"click2mail address validation failed with status {status}: {resp.text}"
                )
            self._sleep(CASS_POLL_SECONDS)

        raise MailCarrierError(
            f"click2mail address CASS validation timed out after "
            f"{int(CASS_MAX_ATTEMPTS * CASS_POLL_SECONDS)} seconds"
        )

    def create_job(self, document_id: str, address_id: str) -> str:
        form = dict(JOB_OPTIONS, documentId=document_id, addressId=address_id)
        resp = self._http.post("/jobs", data=form)
        if resp.status_code >= 400:
            raise self._error("job creation", resp)
        job_id = _child_text(_parse(resp.text), "id")
        if not job_id:
            raise MailCarrierError(f"click2mail job creation returned unexpected response: {resp.text}")
        return job_id

    def submit_job(self, job_id: str) -> None:
        resp = self._http.post(f"/jobs/{job_id}/submit")
        if resp.status_code >= 400:
            raise self._error("job submission", resp)

    def get_job(self, job_id: str) -> Dict[str, Optional[str]]:
        resp = self._http.get(f"/jobs/{job_id}")
        if resp.status_code >= 400:
            raise self._error("job status", resp)
        root = _parse(resp.text)
        return {
            "id": _child_text(root, "id") or job_id,
            "status": _child_text(root, "status") or "UNKNOWN",
            "description": _child_text(root, "description"),
        }

    def get_tracking(self, job_id: str) -> Optional[Dict[str, Optional[str]]]:
        """USPS IMB tracking for a job, or ``None`` while unavailable."""

        try:
            resp = self._http.get(f"/jobs/{job_id}/tracking", params={"trackingType": "IMB"})
        except httpx.HTTPError:
            logger.warning("CLICK2MAIL_TRACKING_UNAVAILABLE job=%s", job_id)
            return None
        if resp.status_code >= 400:
            return None
        try:
            root = ET.fromstring(resp.text)
        except ET.ParseError:
            return None
        piece = root.find(".//mailpiece")
        if piece is None:
            return None
        return {
            "barcode": _child_text(piece, "barcode"),
            "status": _child_text(piece, "status"),
            "statusDate": _child_text(piece, "statusDate"),
            "statusLocation": _child_text(piece, "statusLocation"),
        }

    # --- MailCarrier ------------------------------------------------------
    def send_letter(
        self,
        *,
        to: MailAddress,
        sender: MailAddress,
        text: str,
        description: str = "Credit dispute letter",
    ) -> MailReceipt:
        pdf = self._render_pdf(text)
        document_id = self.upload_document(pdf, document_name_for(to.name))
        address_id = self.upload_address_list(to)
        job_id = self.create_job(document_id, address_id)
        self.submit_job(job_id)
        logger.info(
            "CLICK2MAIL_JOB_SUBMITTED job=%s document=%s address_list=%s",
            job_id,
            document_id,
            address_id,
        )
        return MailReceipt(
            provider=self.name,
            job_id=job_id,
            status=MailStatus.SUBMITTED,
            document_id=document_id,
            address_id=address_id,
        )

    def get_status(self, job_id: str) -> CarrierStatus:
        job = self.get_job(job_id)
        tracking = self.get_tracking(job_id)
        return CarrierStatus(
            status=normalize_click2mail_status(job["status"] or ""),
            raw_status=job["status"] or "UNKNOWN",
            description=job["description"],
            tracking=(
                {
                    "barcode": tracking.get("barcode"),
                    "status": tracking.get("status"),
                    "lastUpdate": tracking.get("statusDate"),
                }
                if tracking
                else None
            ),
        )
