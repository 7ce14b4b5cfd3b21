import json

import httpx
import pytest

from credit800.core.mail import (
    CarrierNotConfigured,
    Click2MailClient,
    LobClient,
    MailAddress,
    MailCarrierError,
    MailConfig,
    PostGridClient,
    build_carrier,
    derive_postgrid_status,
    normalize_click2mail_status,
    normalize_lob_status,
)
from credit800.core.mail.click2mail import build_address_list_xml, document_name_for
from credit800.core.models import MailStatus

TO = MailAddress(
    name="Midland Credit Management",
    organization="Midland Credit Management",
    address_line1="P.O. Box 60578",
    address_line2="Consumer Dispute Department",
    city="Los Angeles",
    state="CA",
    zip="90060",
)
SENDER = MailAddress(name="Alice Q Example", address_line1="1 Main St", city="Austin", state="TX", zip="78701")


def _xml_id(value: str) -> httpx.Response:
    return httpx.Response(200, text=f"<response><id>{value}</id></response>")


# --- status mapping -------------------------------------------------------
@pytest.mark.parametrize(
    "raw,expected",
    [
        ("MAILED", MailStatus.MAILED),
        ("in_production", MailStatus.IN_PRODUCTION),
        ("AWAITING_PRODUCTION", MailStatus.IN_PRODUCTION),
        ("ERROR", MailStatus.ERROR),
        ("EDITING", MailStatus.SUBMITTED),
        ("", MailStatus.SUBMITTED),
    ],
)
def test_click2mail_status(raw, expected):
    assert normalize_click2mail_status(raw) == expected


def test_postgrid_status_prefers_raw_status_then_events():
    assert derive_postgrid_status("delivered", []) == MailStatus.DELIVERED
    assert derive_postgrid_status("ready", []) == MailStatus.SUBMITTED
    assert derive_postgrid_status("ready", [{"name": "Returned to Sender"}]) == MailStatus.RETURNED


def test_lob_status_uses_latest_event():
    events = [{"name": "Mailed"}, {"name": "In Local Area"}]
    assert normalize_lob_status(events) == MailStatus.OUT_FOR_DELIVERY
    assert normalize_lob_status([]) == MailStatus.SUBMITTED


# --- Lob ------------------------------------------------------------------
def test_lob_send_and_status():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "POST":
            return httpx.Response(200, json={"id": "ltr_1", "expected_delivery_date": "2026-10-26"})
        return httpx.Response(
            200,
            json={
                "id": "ltr_1",
                "description": "Dispute",
                "tracking_events": [{"name": "In Transit", "date_created": "2026-10-21T00:00:00Z"}],
            },
        )

    client = LobClient("test_key", transport=httpx.MockTransport(handler))
    receipt = client.send_letter(to=TO, sender=SENDER, text="Hello & goodbye")
    assert receipt.job_id == "ltr_1"
    assert receipt.status == MailStatus.SUBMITTED
    assert receipt.expected_delivery == "2026-10-26"

    body = json.loads(seen[0].content)
    assert str(seen[0].url) == "https://api.lob.com/v1/letters"
    assert body["to"]["address_line2"] == "Consumer Dispute Department"
    assert "address_line2" not in body["from"]
    assert "Hello &amp; goodbye" in body["file"]
    assert seen[0].headers["authorization"].startswith("Basic ")

    status = client.get_status("ltr_1")
    assert status.status == MailStatus.IN_TRANSIT
    assert status.raw_status == "In Transit"


def test_lob_error_message_is_surfaced():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(422, json={"error": {"message": "address invalid"}})
    )
    client = LobClient("test_key", transport=transport)
    with pytest.raises(MailCarrierError) as excinfo:
        client.send_letter(to=TO, sender=SENDER, text="x")
    assert excinfo.value.status_code == 422
    assert "address invalid" in str(excinfo.value)


def test_lob_requires_key():
    with pytest.raises(CarrierNotConfigured):
        LobClient("")


# --- PostGrid -------------------------------------------------------------
def test_postgrid_send_maps_names_and_status():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "letter_1", "status": "ready"})

    client = PostGridClient("pg_key", transport=httpx.MockTransport(handler))
    receipt = client.send_letter(to=TO, sender=SENDER, text="Body")
    assert receipt.job_id == "letter_1"
    assert receipt.status == MailStatus.SUBMITTED

    request = seen[0]
    assert request.headers["x-api-key"] == "pg_key"
    body = json.loads(request.content)
    assert body["from"]["firstName"] == "Alice"
    assert body["from"]["lastName"] == "Q Example"
    assert body["to"]["provinceOrState"] == "CA"
    assert body["mailingClass"] == "first_class"


def test_postgrid_status_from_tracking_events():
    payload = {
        "id": "letter_1",
        "status": "ready",
        "trackingEvents": [{"name": "Delivered", "datetime": "2026-10-24T10:00:00Z"}],
    }
    client = PostGridClient("pg_key", transport=httpx.MockTransport(lambda r: httpx.Response(200, json=payload)))
    status = client.get_status("letter_1")
    assert status.status == MailStatus.DELIVERED
    assert status.tracking["lastUpdate"] == "2026-10-24T10:00:00Z"


def test_postgrid_error_uses_top_level_message():
    transport = httpx.MockTransport(lambda r: httpx.Response(401, json={"message": "bad key"}))
    with pytest.raises(MailCarrierError, match="bad key"):
        PostGridClient("pg_key", transport=transport).get_status("letter_1")


# --- Click2Mail -----------------------------------------------------------
def _click2mail(handler, sleeps=None):
    return Click2MailClient(
        "user",
        "pass",
        staging=True,
        pdf_renderer=lambda text: b"%PDF-1.4 " + text.encode(),
        transport=httpx.MockTransport(handler),
        sleep=(sleeps.append if sleeps is not None else lambda seconds: None),
    )


def test_click2mail_full_flow_polls_cass():
    calls = []
    cass = iter(["1", "3", "5"])

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.replace("/molpro", "")
        calls.append((request.method, path))
        if path == "/documents":
            return _xml_id("doc-9")
        if path == "/addressLists" and request.method == "POST":
            return _xml_id("al-7")
        if path == "/addressLists/al-7":
            return httpx.Response(200, text=f"<addressList><status>{next(cass)}</status></addressList>")
        if path == "/jobs":
            return _xml_id("job-3")
        if path == "/jobs/job-3/submit":
            return httpx.Response(200, text="<job><status>0</status></job>")
        return httpx.Response(404)

    sleeps = []
    receipt = _click2mail(handler, sleeps).send_letter(to=TO, sender=SENDER, text="Letter")
    assert receipt.job_id == "job-3"
    assert receipt.document_id == "doc-9"
    assert receipt.address_id == "al-7"
    assert receipt.status == MailStatus.SUBMITTED
    assert len(sleeps) == 2
    assert calls[0] == ("POST", "/documents")
    assert calls[-1] == ("POST", "/jobs/job-3/submit")


def test_click2mail_cass_failure_status():
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.replace("/molpro", "")
        if path == "/documents":
            return _xml_id("doc-9")
        if path == "/addressLists":
            return _xml_id("al-7")
        return httpx.Response(200, text="<addressList><status>-2</status></addressList>")

    with pytest.raises(MailCarrierError, match="address validation failed"):
        _click2mail(handler).send_letter(to=TO, sender=SENDER, text="Letter")


def test_click2mail_status_with_tracking():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/tracking"):
            return httpx.Response(
                200,
                text=(
                    "<tracking><mailpiece><barcode>0070</barcode><status>Delivered</status>"
                    "<statusDate>2026-10-24</statusDate></mailpiece></tracking>"
                ),
            )
        return httpx.Response(200, text="<job><id>job-3</id><status>MAILED</status></job>")

    status = _click2mail(handler).get_status("job-3")
    assert status.status == MailStatus.MAILED
    assert status.tracking == {"barcode": "0070", "status": "Delivered", "lastUpdate": "2026-10-24"}


def test_click2mail_status_without_tracking():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/tracking"):
            return httpx.Response(404)
        return httpx.Response(200, text="<job><status>IN_PRODUCTION</status></job>")

    status = _click2mail(handler).get_status("job-3")
    assert status.status == MailStatus.IN_PRODUCTION
    assert status.tracking is None


def test_click2mail_malformed_xml():
    transport_handler = lambda request: httpx.Response(200, text="not xml")  # noqa: E731
    with pytest.raises(MailCarrierError, match="malformed"):
        _click2mail(transport_handler).upload_document(b"pdf", "doc")


def test_address_list_xml_escapes_values():
    xml = build_address_list_xml(
        MailAddress(name="Smith & Sons", organization="Smith & Sons", address_line1="1 <A> St", city="X", state="TX", zip="1"),
        "list",
    )
    assert "Smith &amp; Sons" in xml
    assert "1 &lt;A&gt; St" in xml


def test_document_name_is_sanitized():
    assert document_name_for("Capital One, N.A.", 123) == "dispute-Capital-One--N-A--123"


def test_build_carrier_checks_credentials():
    with pytest.raises(CarrierNotConfigured):
        build_carrier("click2mail", MailConfig())
    with pytest.raises(CarrierNotConfigured):
        build_carrier("fax", MailConfig())
    assert isinstance(build_carrier("lob", MailConfig(lob_api_key="k")), LobClient)
