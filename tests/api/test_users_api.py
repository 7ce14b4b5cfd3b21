from credit800.core.models import Collections
from tests.helpers.fakes import auth_headers, seed_dispute, seed_item, seed_profile, seed_report

PROFILE = {
    "fullName": "Alice Example",
    "dateOfBirth": "1990-01-01",
    "address": "1 Main St",
    "city": "Austin",
    "state": "TX",
    "zip": "78701",
}


def test_profile_requires_auth(client):
    assert client.get("/api/users/profile").status_code == 401
    assert client.delete("/api/users").status_code == 401


def test_save_and_read_profile(client, store):
    store.set(Collections.USERS, "alice", {"stripeCustomerId": "cus_1"})

    assert client.post("/api/users/profile", json=PROFILE, headers=auth_headers()).status_code == 200

    profile = client.get("/api/users/profile", headers=auth_headers()).get_json()["profile"]
    assert profile["fullName"] == "Alice Example"
    assert profile["email"] == "alice@example.com"
    assert profile["stripeCustomerId"] == "cus_1"


def test_profile_without_document(client):
    assert client.get("/api/users/profile", headers=auth_headers()).get_json() == {"profile": None}


def test_profile_validation(client):
    resp = client.post("/api/users/profile", json={**PROFILE, "zip": " "}, headers=auth_headers())
    assert resp.status_code == 400
    assert resp.get_json()["details"][0]["field"] == "zip"


def test_welcome_skips_when_email_disabled(client):
    resp = client.post("/api/users/welcome", json={"name": "Alice"}, headers=auth_headers())
    assert resp.get_json() == {"ok": True, "sent": False}


def test_delete_account_cascades(client, store):
    seed_profile(store)
    seed_report(store)
    seed_item(store)
    seed_dispute(store)
    client.get("/api/referrals", headers=auth_headers())
    bob_item = seed_item(store, "bob")

    resp = client.delete("/api/users", headers=auth_headers())

    assert resp.get_json() == {"success": True, "deleted": 4}
    assert store.get(Collections.USERS, "alice") is None
    assert store.query(Collections.REFERRALS, [("referrerId", "==", "alice")]) == []
    assert store.get(Collections.REPORT_ITEMS, bob_item) is not None


def test_admin_stats_forbidden_for_regular_users(client, monkeypatch):
    assert client.get("/api/admin/stats", headers=auth_headers()).status_code == 403
    monkeypatch.setenv("ADMIN_EMAIL", "root@example.com")
    assert client.get("/api/admin/stats", headers=auth_headers()).status_code == 403


def test_admin_stats(client, store, monkeypatch):
    monkeypatch.setenv("ADMIN_EMAIL", "Root@Example.com")
    store.set(Collections.USERS, "alice", {"subscriptionStatus": "active"})
    store.set(Collections.USERS, "bob", {"subscriptionStatus": "canceled"})
    seed_dispute(store, createdAt="2000-01-01T00:00:00Z", reason="Not mine")
    seed_dispute(store, "bob", createdAt="9999-01-01T00:00:00Z", reason="Not mine")

    resp = client.get("/api/admin/stats", headers=auth_headers("root"))

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["totalUsers"] == 2
    assert body["proSubscribers"] == 1
    assert body["mrrCents"] == 2999
    assert body["disputesLast30"] == 1
    assert body["topReasons"] == [{"reason": "Not mine", "count": 2}]
    assert body["recentDisputes"][0]["userId"] == "bob"


def test_admin_stats_counts_recent_uploads(client, store, monkeypatch):
    monkeypatch.setenv("ADMIN_EMAIL", "root@example.com")
    seed_report(store, uploadedAt="9999-01-01T00:00:00Z")
    seed_report(store, "bob", uploadedAt="2000-01-01T00:00:00Z")
    client.post("/api/reports/create", json={"fileName": "new.pdf"}, headers=auth_headers("carol"))

    body = client.get("/api/admin/stats", headers=auth_headers("root")).get_json()

    assert body["reportsLast7"] == 2
