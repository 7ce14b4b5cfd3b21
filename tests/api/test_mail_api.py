import pytest

from credit800.core.models import Collections, DisputeStatus, MailStatus
from tests.helpers.fakes import FakeCarrier, auth_headers, carrier_error, seed_dispute, seed_item, seed_profile

CFPB_SENDER = {
    "name": "Alice Example",
    "address_line1": "1 Main St",
    "address_city": "Austin",
    "address_state": "TX",
    "address_zip": "78701",
}


@pytest.fixture
def carriers(services):
    carriers = {"click2mail": FakeCarrier(), "lob": FakeCarrier("lob"), "postgrid": FakeCarrier("postgrid")}
    services["carriers"] = carriers
    return carriers


def _mail(client, dispute_id, **extra):
    return client.post("/api/disputes/mail", json={"disputeId": dispute_id, **extra}, headers=auth_headers())


def test_mail_requires_auth(client):
    assert client.post("/api/disputes/mail", json={"disputeId": "d1"}).status_code == 401


def test_mail_dispute_with_default_carrier(client, store, carriers):
    seed_profile(store)
    item_id = seed_item(store)
    dispute_id = seed_dispute(store, reportItemId=item_id)

    resp = _mail(client, dispute_id)

    assert resp.status_code == 200
    assert resp.get_json() == {
        "success": True,
        "provider": "click2mail",
        "mailJobId": "job-1",
        "mailStatus": MailStatus.SUBMITTED,
        "expectedDelivery": "2026-10-26",
    }
    sent = carriers["click2mail"].sent[0]
    assert sent["to"].address_line1 == "P.O. Box 60578"
    assert sent["sender"].name == "Alice Example"
    assert sent["text"] == "Dear Sir or Madam, ..."

    dispute = store.get(Collections.DISPUTES, dispute_id)
    assert dispute["status"] == DisputeStatus.SENT
    assert dispute["mailProvider"] == "click2mail"
    assert store.get(Collections.REPORT_ITEMS, item_id)["disputeStatus"] == DisputeStatus.SENT


def test_mail_with_requested_provider(client, store, carriers):
    seed_profile(store)
    dispute_id = seed_dispute(store)
    resp = _mail(client, dispute_id, provider="lob")
    assert resp.get_json()["provider"] == "lob"
    assert carriers["click2mail"].sent == []


def test_mail_other_providers_need_profile_address(client, store, carriers):
    dispute_id = seed_dispute(store)
    resp = _mail(client, dispute_id, provider="postgrid")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Complete your profile address before mailing"
    assert _mail(client, dispute_id, provider="fedex").status_code == 400


def test_mail_rejects_incomplete_disputes(client, store, carriers):
    no_letter = seed_dispute(store, letterContent="")
    no_address = seed_dispute(store, creditorAddress=None)
    mailed = seed_dispute(store, mailJobId="job-9", status=DisputeStatus.SENT)

    assert _mail(client, no_letter).get_json()["error"] == "Dispute has no letter content"
    assert _mail(client, no_address).get_json()["error"] == "No creditor address available"
    conflict = _mail(client, mailed)
    assert conflict.status_code == 409
    assert conflict.get_json()["mailJobId"] == "job-9"
    assert _mail(client, seed_dispute(store, "bob")).status_code == 403
    assert _mail(client, "missing").status_code == 404


def test_mail_carrier_failure(client, store, services):
    services["carriers"] = {"click2mail": FakeCarrier(fail=carrier_error("address undeliverable"))}
    dispute_id = seed_dispute(store)

    resp = _mail(client, dispute_id)

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to mail letter", "details": "address undeliverable"}
    dispute = store.get(Collections.DISPUTES, dispute_id)
    assert dispute["mailStatus"] == MailStatus.ERROR
    assert dispute["status"] == DisputeStatus.DRAFT


def test_mail_without_carrier_credentials_is_503(client, store):
    dispute_id = seed_dispute(store)
    resp = _mail(client, dispute_id)
    assert resp.status_code == 503
    assert resp.get_json()["error"] == "Mail service is not configured"


def test_mail_status(client, store, carriers):
    dispute_id = seed_dispute(
        store, mailJobId="job-1", mailProvider="click2mail", mailStatus=MailStatus.SUBMITTED
    )

    resp = client.get(f"/api/disputes/mail/status?disputeId={dispute_id}", headers=auth_headers())

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["mailStatus"] == MailStatus.IN_TRANSIT
    assert body["mailTracking"]["status"] == "In Transit"
    assert carriers["click2mail"].status_checks == ["job-1"]
    assert store.get(Collections.DISPUTES, dispute_id)["mailStatus"] == MailStatus.IN_TRANSIT


def test_mail_status_errors(client, store, carriers):
    unmailed = seed_dispute(store)
    resp = client.get(f"/api/disputes/mail/status?disputeId={unmailed}", headers=auth_headers())
    assert resp.get_json()["error"] == "This dispute has not been mailed"
    assert client.get("/api/disputes/mail/status", headers=auth_headers()).status_code == 400

    failing = seed_dispute(store, mailJobId="job-2", mailProvider="click2mail")
    carriers["click2mail"].status_error = carrier_error()
    resp = client.get(f"/api/disputes/mail/status?disputeId={failing}", headers=auth_headers())
    assert resp.status_code == 500


def test_refresh_all_in_flight(client, store, carriers):
    in_flight = seed_dispute(store, mailJobId="job-1", mailProvider="click2mail", mailStatus=MailStatus.SUBMITTED)
    seed_dispute(store, mailJobId="job-2", mailProvider="click2mail", mailStatus=MailStatus.DELIVERED)
    seed_dispute(store)

    resp = client.post("/api/disputes/mail/refresh", headers=auth_headers())

    assert resp.status_code == 200
    body = resp.get_json()
    assert (body["checked"], body["updated"], body["failed"]) == (1, 1, 0)
    assert body["disputes"][0]["disputeId"] == in_flight


def test_refresh_counts_failures(client, store, carriers):
    seed_dispute(store, mailJobId="job-1", mailProvider="click2mail", mailStatus=MailStatus.SUBMITTED)
    carriers["click2mail"].status_error = carrier_error()

    body = client.post("/api/disputes/mail/refresh", json={}, headers=auth_headers()).get_json()

    assert (body["checked"], body["updated"], body["failed"]) == (1, 0, 1)


def test_refresh_skips_unconfigured_provider(client, store, services):
    services["carriers"] = {"click2mail": FakeCarrier()}
    seed_dispute(store, mailJobId="job-1", mailProvider="lob", mailStatus=MailStatus.SUBMITTED)
    tracked = seed_dispute(store, mailJobId="job-2", mailProvider="click2mail", mailStatus=MailStatus.SUBMITTED)

    resp = client.post("/api/disputes/mail/refresh", headers=auth_headers())

    assert resp.status_code == 200
    body = resp.get_json()
    assert (body["checked"], body["updated"], body["failed"]) == (2, 1, 1)
    assert store.get(Collections.DISPUTES, tracked)["mailStatus"] == MailStatus.IN_TRANSIT


def test_refresh_single_dispute(client, store, carriers):
    dispute_id = seed_dispute(store, mailJobId="job-1", mailProvider="click2mail", mailStatus=MailStatus.DELIVERED)
    body = client.post(
        "/api/disputes/mail/refresh", json={"disputeId": dispute_id}, headers=auth_headers()
    ).get_json()
    assert body["checked"] == 1

    carriers["click2mail"].status_error = carrier_error()
    resp = client.post("/api/disputes/mail/refresh", json={"disputeId": dispute_id}, headers=auth_headers())
    assert resp.status_code == 500

    unmailed = seed_dispute(store)
    resp = client.post("/api/disputes/mail/refresh", json={"disputeId": unmailed}, headers=auth_headers())
    assert resp.status_code == 400


def test_cfpb_mail(client, carriers):
    resp = client.post(
        "/api/cfpb/mail",
        json={"complaintText": "I am filing a complaint.", "fromAddress": CFPB_SENDER},
        headers=auth_headers(),
    )

    assert resp.status_code == 200
    assert resp.get_json()["mailJobId"] == "job-1"
    sent = carriers["postgrid"].sent[0]
    assert sent["to"].name == "Consumer Financial Protection Bureau"
    assert sent["sender"].city == "Austin"
    assert sent["description"] == "CFPB Complaint Letter"


def test_cfpb_mail_validation(client, carriers):
    resp = client.post(
        "/api/cfpb/mail",
        json={"complaintText": "x", "fromAddress": {"name": "Alice"}},
        headers=auth_headers(),
    )
    assert resp.status_code == 400
    fields = {d["field"] for d in resp.get_json()["details"]}
    assert "fromAddress.address_line1" in fields


def test_cfpb_mail_without_postgrid_is_503(client):
    resp = client.post(
        "/api/cfpb/mail",
        json={"complaintText": "x", "fromAddress": CFPB_SENDER},
        headers=auth_headers(),
    )
    assert resp.status_code == 503
