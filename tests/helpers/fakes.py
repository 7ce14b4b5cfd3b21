import hashlib
import hmac
import time
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

from credit800.core.analysis import AnalysisError, AnalysisResult
from credit800.core.mail import CarrierStatus, MailCarrierError, MailReceipt
from credit800.core.models import Collections, DisputeStatus, MailStatus, ReportItem, ReportStatus


def auth_headers(uid: str = "alice") -> Dict[str, str]:
    return {"Authorization": f"Bearer good-{uid}"}


class FakeCarrier:
    """In-memory print-and-mail carrier."""

    def __init__(self, name: str = "click2mail", *, fail: Optional[Exception] = None):
        self.name = name
        self.fail = fail
        self.sent: List[Dict[str, Any]] = []
        self.status_checks: List[str] = []
        self.status_error: Optional[Exception] = None
        self.status = CarrierStatus(
            status=MailStatus.IN_TRANSIT,
            raw_status="in_transit",
            description="Dispute letter",
            tracking={"status": "In Transit", "lastUpdate": "2026-10-20T12:00:00Z"},
            expected_delivery="2026-10-26",
        )

    def send_letter(self, *, to, sender, text, description="Credit dispute letter") -> MailReceipt:
        if self.fail is not None:
            raise self.fail
        self.sent.append({"to": to, "sender": sender, "text": text, "description": description})
        return MailReceipt(
            provider=self.name,
            job_id=f"job-{len(self.sent)}",
            status=MailStatus.SUBMITTED,
            document_id="doc-1",
            address_id="addr-1",
            expected_delivery="2026-10-26",
        )

    def get_status(self, job_id: str) -> CarrierStatus:
        self.status_checks.append(job_id)
        if self.status_error is not None:
            raise self.status_error
        return self.status


def carrier_error(message: str = "carrier down") -> MailCarrierError:
    return MailCarrierError(message, status_code=502)


class FakeAnalyzer:
    def __init__(self, items: Optional[List[ReportItem]] = None, *, score: Optional[int] = 640, error: str = ""):
        self.items = items if items is not None else [sample_report_item()]
        self.score = score
        self.error = error
        self.calls: List[str] = []

    def analyze(self, pdf_bytes: bytes, bureau: str) -> AnalysisResult:
        self.calls.append(bureau)
        if self.error:
            raise AnalysisError(self.error)
        return AnalysisResult(items=list(self.items), credit_score=self.score, summary={}, provider="fake")


def sample_report_item(**overrides: Any) -> ReportItem:
    data = dict(
        creditor_name="Midland Credit Management",
        account_number="****1234",
        account_type="Collection",
        balance=1250.0,
        status="COLLECTION",
        bureau="Equifax",
    )
    data.update(overrides)
    return ReportItem(**data)


class _Recorder:
    def __init__(self, result: Any):
        self.result = result
        self.calls: List[Dict[str, Any]] = []

    def create(self, params=None, **kwargs):
        self.calls.append(params or kwargs)
        return self.result

    def retrieve(self, obj_id, params=None, **kwargs):
        self.calls.append({"id": obj_id, **(params or {})})
        return self.result(obj_id) if callable(self.result) else self.result


class FakeStripeClient:
    """Mimics the parts of ``stripe.StripeClient`` that billing calls."""

    def __init__(self, *, customer_uid: str = "alice", subscription: Optional[Dict[str, Any]] = None):
        self.customers = SimpleNamespace(
            create=_Recorder(SimpleNamespace(id="cus_new")).create,
            retrieve=_Recorder({"id": "cus_1", "metadata": {"firebaseUid": customer_uid}}).retrieve,
        )
        self.checkout_sessions = _Recorder(SimpleNamespace(url="https://checkout.stripe.test/s/1"))
        self.checkout = SimpleNamespace(sessions=self.checkout_sessions)
        self.billing_portal = SimpleNamespace(
            sessions=_Recorder(SimpleNamespace(url="https://billing.stripe.test/p/1"))
        )
        self.subscriptions = _Recorder(
            subscription
            or {
                "id": "sub_1",
                "status": "active",
                "current_period_end": 1798761600,
                "cancel_at_period_end": False,
                "items": {"data": [{"price": {"unit_amount": 1999, "currency": "usd"}}]},
                "default_payment_method": None,
                "latest_invoice": None,
            }
        )


# --- seeding -------------------------------------------------------------
def seed_profile(store, uid: str = "alice", **overrides: Any) -> Dict[str, Any]:
    profile = {
        "fullName": "Alice Example",
        "dateOfBirth": "1990-01-01",
        "address": "1 Main St",
        "address2": "",
        "city": "Austin",
        "state": "TX",
        "zip": "78701",
        "email": f"{uid}@example.com",
    }
    profile.update(overrides)
    store.set(Collections.USERS, uid, profile)
    return profile


def seed_report(store, uid: str = "alice", **overrides: Any) -> str:
    data = {
        "userId": uid,
        "fileName": "report.pdf",
        "filePath": None,
        "uploadedAt": "2026-10-01T00:00:00Z",
        "status": ReportStatus.UPLOADED,
        "bureau": "Equifax",
    }
    data.update(overrides)
    return store.add(Collections.CREDIT_REPORTS, data)


def seed_item(store, uid: str = "alice", report_id: str = "r1", **overrides: Any) -> str:
    data = {
        "userId": uid,
        "creditReportId": report_id,
        **sample_report_item().to_dict(),
    }
    data.update(overrides)
    return store.add(Collections.REPORT_ITEMS, data)


def seed_dispute(store, uid: str = "alice", **overrides: Any) -> str:
    data = {
        "userId": uid,
        "reportItemId": None,
        "creditorName": "Midland Credit Management",
        "accountNumber": "****1234",
        "bureau": "Equifax",
        "reason": "Not mine",
        "letterContent": "Dear Sir or Madam, ...",
        "templateId": "debt-validation",
        "creditorAddress": {
            "name": "Midland Credit Management",
            "address": "P.O. Box 60578",
            "city": "Los Angeles",
            "state": "CA",
            "zip": "90060",
            "department": "Consumer Dispute Department",
            "source": "database",
            "confidence": None,
        },
        "status": DisputeStatus.DRAFT,
        "createdAt": "2026-09-01T00:00:00Z",
    }
    data.update(overrides)
    return store.add(Collections.DISPUTES, data)


def stripe_signature(payload: bytes, secret: str = "whsec_test") -> str:
    """A ``Stripe-Signature`` header value for ``payload``."""

    ts = int(time.time())
    digest = hmac.new(secret.encode(), f"{ts}.".encode() + payload, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"
