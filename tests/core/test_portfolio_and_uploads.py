import json
from datetime import date

import httpx
import pytest

from credit800.core.models import Collections
from credit800.core.notifications import create_notification, list_notifications, mark_read
from credit800.core.plaid import PlaidClient, PlaidConfig, PlaidError, PlaidNotConfigured
from credit800.core.portfolio import (
    compute_allocation,
    compute_totals,
    map_plaid_type,
    new_account,
    snapshot_net_worth,
)
from credit800.core.store import MemoryStore
from credit800.core.uploads import UploadLimiter, inspect_pdf, safe_filename, store_upload

ACCOUNTS = [
    {"type": "checking", "balance": 1500},
    {"type": "investment", "balance": 10000},
    {"type": "checking", "balance": 500},
    {"type": "credit_card", "balance": 2500},
    {"type": "savings", "balance": 999, "isHidden": True},
]


@pytest.mark.parametrize(
    "plaid_type,subtype,expected",
    [
        ("depository", "checking", "checking"),
        ("depository", "savings", "savings"),
        ("investment", "401k", "retirement"),
        ("investment", "brokerage", "investment"),
        ("credit", "credit card", "credit_card"),
        ("loan", "student", "student_loan"),
        ("loan", "home equity", "other_liability"),
        ("other", None, "other_asset"),
    ],
)
def test_map_plaid_type(plaid_type, subtype, expected):
    assert map_plaid_type(plaid_type, subtype) == expected


def test_totals_skip_hidden_accounts():
    assert compute_totals(ACCOUNTS) == {"totalAssets": 12000.0, "totalLiabilities": 2500.0, "netWorth": 9500.0}


def test_allocation_groups_assets_by_type():
    assert compute_allocation(ACCOUNTS) == [
        {"name": "Investments", "type": "investment", "value": 10000.0},
        {"name": "Checking", "type": "checking", "value": 2000.0},
    ]


def test_snapshot_is_one_per_day():
    store = MemoryStore()
    store.add(Collections.PORTFOLIO_ACCOUNTS, new_account("alice", name="Chk", institution="Bank", type="checking", balance=100))
    snapshot_net_worth(store, "alice", today=date(2026, 10, 19))
    store.add(Collections.PORTFOLIO_ACCOUNTS, new_account("alice", name="Card", institution="Bank", type="credit_card", balance=40))
    snapshot = snapshot_net_worth(store, "alice", today=date(2026, 10, 19))

    assert snapshot["netWorth"] == 60.0
    docs = store.query_user(Collections.PORTFOLIO_SNAPSHOTS, "alice")
    assert len(docs) == 1
    assert docs[0]["id"] == "alice_2026-10-19"


# --- Plaid ----------------------------------------------------------------
def _plaid(handler):
    return PlaidClient(PlaidConfig(client_id="cid", secret="sec"), transport=httpx.MockTransport(handler))


def test_plaid_requires_credentials():
    with pytest.raises(PlaidNotConfigured):
        PlaidClient(PlaidConfig())
    with pytest.raises(PlaidNotConfigured):
        PlaidClient(PlaidConfig(client_id="cid", secret="sec", env="mars"))


def test_plaid_requests():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/link/token/create":
            return httpx.Response(200, json={"link_token": "link-sandbox-1"})
        if request.url.path == "/item/public_token/exchange":
            return httpx.Response(200, json={"access_token": "access-1", "item_id": "item-1"})
        return httpx.Response(200, json={"accounts": [{"account_id": "a1", "balances": {"current": 12.5}}]})

    client = _plaid(handler)
    assert client.create_link_token("alice") == "link-sandbox-1"
    assert client.exchange_public_token("public-1") == {"access_token": "access-1", "item_id": "item-1"}
    assert client.get_balances("access-1")[0]["account_id"] == "a1"

    assert str(seen[0].url).startswith("https://sandbox.plaid.com/")
    assert seen[0].headers["PLAID-CLIENT-ID"] == "cid"
    assert json.loads(seen[0].content)["user"] == {"client_user_id": "alice"}


def test_plaid_error_carries_code():
    client = _plaid(
        lambda r: httpx.Response(400, json={"error_code": "ITEM_LOGIN_REQUIRED", "error_message": "login required"})
    )
    with pytest.raises(PlaidError) as excinfo:
        client.get_balances("access-1")
    assert excinfo.value.error_code == "ITEM_LOGIN_REQUIRED"
    assert "login required" in str(excinfo.value)


# --- uploads --------------------------------------------------------------
class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_upload_limiter_free_and_pro():
    clock = _Clock()
    limiter = UploadLimiter(clock=clock)

    assert limiter.allow("alice", pro=False) is True
    assert limiter.allow("alice", pro=False) is False
    assert limiter.retry_after("alice") == 24 * 60 * 60

    for _ in range(3):
        assert limiter.allow("bob", pro=True) is True
    assert limiter.allow("bob", pro=True) is False

    clock.now += 24 * 60 * 60
    assert limiter.allow("alice", pro=False) is True
    assert limiter.retry_after("carol") is None


def test_store_upload_sanitizes_name(tmp_path):
    path = store_upload(tmp_path, "alice", "../my report (1).pdf", b"%PDF")
    assert path.parent == tmp_path / "alice"
    assert path.name.endswith("-my_report__1_.pdf")
    assert path.read_bytes() == b"%PDF"
    assert safe_filename("") == "report.pdf"


def test_inspect_pdf_handles_unreadable_file(tmp_path):
    bogus = tmp_path / "bogus.pdf"
    bogus.write_bytes(b"not a pdf")
    assert inspect_pdf(bogus) == {"pageCount": None, "textPreview": ""}


# --- notifications --------------------------------------------------------
def test_notifications_listing_and_mark_read():
    store = MemoryStore()
    first = create_notification(store, "alice", "general", "One", "first")
    create_notification(store, "alice", "general", "Two", "second")
    create_notification(store, "bob", "general", "Other", "not yours")

    assert len(list_notifications(store, "alice")) == 2
    assert mark_read(store, "alice", [first, "missing"]) == 1
    assert mark_read(store, "alice") == 1
    assert mark_read(store, "alice") == 0
    assert store.get(Collections.NOTIFICATIONS, first)["read"] is True
