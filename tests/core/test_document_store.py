import pytest

from credit800.core.store import MemoryStore, StoreError, build_store


def test_add_get_returns_copy_with_id():
    store = MemoryStore()
    doc_id = store.add("things", {"userId": "u1", "tags": ["a"]})
    doc = store.get("things", doc_id)
    assert doc == {"id": doc_id, "userId": "u1", "tags": ["a"]}

    doc["tags"].append("b")
    assert store.get("things", doc_id)["tags"] == ["a"]


def test_get_missing_returns_none():
    assert MemoryStore().get("things", "nope") is None


def test_set_merge_and_overwrite():
    store = MemoryStore()
    store.set("users", "u1", {"a": 1, "b": 2})
    store.set("users", "u1", {"b": 3}, merge=True)
    assert store.get("users", "u1") == {"id": "u1", "a": 1, "b": 3}

    store.set("users", "u1", {"c": 4})
    assert store.get("users", "u1") == {"id": "u1", "c": 4}


def test_update_missing_document_raises():
    with pytest.raises(StoreError):
        MemoryStore().update("users", "ghost", {"a": 1})


def test_query_filters_order_and_limit():
    store = MemoryStore()
    store.add("scores", {"userId": "u1", "score": 600, "recordedAt": "2026-01-02"})
    store.add("scores", {"userId": "u1", "score": 650, "recordedAt": "2026-03-01"})
    store.add("scores", {"userId": "u1", "score": 700})
    store.add("scores", {"userId": "u2", "score": 800, "recordedAt": "2026-02-01"})

    rows = store.query_user("scores", "u1", order_by="recordedAt", descending=True)
    assert [r["score"] for r in rows] == [650, 600, 700]

    rows = store.query("scores", [("score", ">=", 650)], order_by="score", limit=2)
    assert [r["score"] for r in rows] == [650, 700]


def test_query_range_filter_skips_missing_field():
    store = MemoryStore()
    store.add("docs", {"n": 1})
    store.add("docs", {})
    assert len(store.query("docs", [("n", "<", 5)])) == 1


def test_query_unknown_operator():
    store = MemoryStore()
    store.add("docs", {"n": 1})
    with pytest.raises(StoreError):
        store.query("docs", [("n", "~", 1)])


def test_delete_is_idempotent():
    store = MemoryStore()
    doc_id = store.add("docs", {"n": 1})
    store.delete("docs", doc_id)
    store.delete("docs", doc_id)
    assert store.get("docs", doc_id) is None


def test_build_store_rejects_unknown_backend():
    assert isinstance(build_store("memory"), MemoryStore)
    with pytest.raises(StoreError):
        build_store("sqlite")
