import pytest

from credit800.core.addresses import (
    AddressResolver,
    TTLCache,
    format_address_lines,
    get_bureau_address,
    lookup_static,
    normalize_name,
)
from credit800.core.services.ai_client import AIConfig
from tests.helpers.fake_ai_client import FakeAIClient


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _resolver(fake: FakeAIClient, clock=None, api_key: str = "sk-test") -> AddressResolver:
    return AddressResolver(
        AIConfig(api_key=api_key),
        client_factory=lambda cfg: fake,
        clock=clock or _Clock(),
    )


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Midland Credit Management, Inc.", "midland credit management"),
        ("  LVNV   Funding LLC ", "lvnv funding"),
        ("Capital One", "capital one"),
    ],
)
def test_normalize_name(raw, expected):
    assert normalize_name(raw) == expected


def test_static_lookup_exact_alias_and_partial():
    assert lookup_static("Midland Credit Management LLC").name == "Midland Credit Management"
    assert lookup_static("AMEX").name.startswith("American Express")
    assert lookup_static("Portfolio Recovery Associates").city == "Norfolk"
    assert lookup_static("") is None


def test_bureau_addresses():
    for bureau in ("Equifax", "Experian", "TransUnion", "TRANSUNION"):
        assert get_bureau_address(bureau) is not None
    assert get_bureau_address("Nobody") is None


def test_format_address_lines_includes_department():
    lines = format_address_lines(lookup_static("Midland Credit Management"))
    assert lines[0] == "Consumer Dispute Department"
    assert lines[-1] == "Los Angeles, CA 90060"


def test_static_hit_skips_ai():
    fake = FakeAIClient()
    found = _resolver(fake).resolve("Capital One")
    assert found is not None and found.source == "database"
    assert fake.chat_payloads == []


def test_ai_lookup_is_cached_for_ttl():
    fake = FakeAIClient()
    fake.add_chat_response(
        {"name": "Acme Lending", "address": "PO Box 1", "city": "Reno", "state": "NV", "zip": "89501", "confidence": "high"}
    )
    fake.add_chat_response(
        {"name": "Acme Lending", "address": "PO Box 2", "city": "Reno", "state": "NV", "zip": "89501", "confidence": "high"}
    )
    clock = _Clock()
    resolver = _resolver(fake, clock)

    first = resolver.resolve("Acme Lending")
    assert first.address == "PO Box 1"
    assert first.source == "ai"

    clock.now += 60
    assert resolver.resolve("ACME LENDING").address == "PO Box 1"
    assert len(fake.chat_payloads) == 1

    clock.now += 24 * 60 * 60
    assert resolver.resolve("Acme Lending").address == "PO Box 2"
    assert len(fake.chat_payloads) == 2


def test_low_confidence_answer_is_cached_as_miss():
    fake = FakeAIClient()
    fake.add_chat_response({"address": "Somewhere", "city": "X", "confidence": "low"})
    resolver = _resolver(fake)
    assert resolver.resolve("Acme Lending") is None
    assert resolver.resolve("Acme Lending") is None
    assert len(fake.chat_payloads) == 1


def test_ai_failure_returns_none_and_is_not_cached():
    fake = FakeAIClient()
    fake.add_chat_response(RuntimeError("boom"))
    fake.add_chat_response({"address": "PO Box 9", "city": "Reno", "state": "NV", "zip": "1", "confidence": "medium"})
    resolver = _resolver(fake)
    assert resolver.resolve("Acme Lending") is None
    assert resolver.resolve("Acme Lending").address == "PO Box 9"


def test_ai_disabled_without_key():
    fake = FakeAIClient()
    resolver = _resolver(fake, api_key="")
    assert resolver.ai_enabled is False
    assert resolver.resolve("Acme Lending") is None
    assert fake.chat_payloads == []


def test_ttl_cache_expiry():
    clock = _Clock()
    cache = TTLCache(10, clock)
    cache.set("k", None)
    assert cache.get("k") == (True, None)
    clock.now += 10
    assert cache.get("k") == (False, None)
    assert len(cache) == 0
