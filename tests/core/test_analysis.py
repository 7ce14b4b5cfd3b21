import json

import pytest

from credit800.core.analysis import (
    AnalysisError,
    AnalysisParseError,
    ReportAnalyzer,
    build_action_plan,
    generate_action_plan,
    generate_removal_strategies,
    parse_analysis_json,
)
from credit800.core.analysis.parser import normalize_bureau
from credit800.core.json_tools import try_fix_to_json
from credit800.core.models import Collections
from credit800.core.store import MemoryStore
from tests.helpers.fake_ai_client import FakeClaude, FakeGemini

ANALYSIS = {
    "bureau": "EQUIFAX INFORMATION SERVICES",
    "score": "642",
    "items": [
        {
            "creditorName": "LVNV Funding",
            "accountNumber": "****9876",
            "accountType": "Collection",
            "balance": "$1,234.50",
            "status": "collection",
            "isDisputable": True,
        },
        {
            "creditorName": "Chase",
            "accountType": "Credit Card",
            "balance": 400,
            "creditLimit": 1000,
            "status": "LATE_30",
            "removalStrategies": [{"method": "Goodwill", "description": "Ask nicely", "priority": "LOW", "successRate": "10%"}],
        },
        "not an item",
    ],
}


def test_try_fix_to_json_handles_fences_and_noise():
    assert try_fix_to_json('```json\n{"a": 1}\n```') == {"a": 1}
    assert try_fix_to_json('Sure! {"a": 2} hope that helps') == {"a": 2}
    assert try_fix_to_json("[1, 2]") is None
    assert try_fix_to_json(None) is None


def test_try_fix_to_json_repairs_commas_and_quotes():
    assert try_fix_to_json('{"items": [1, 2,],}') == {"items": [1, 2]}
    assert try_fix_to_json("{'bureau': 'Equifax'}") == {"bureau": "Equifax"}
    assert try_fix_to_json('```json\n{creditScore: 640}\n```') == {"creditScore": 640}


@pytest.mark.parametrize(
    "raw,expected",
    [("equifax", "Equifax"), ("Experian PLC", "Experian"), ("Trans Union", "TransUnion"), ("Other", "Other")],
)
def test_normalize_bureau(raw, expected):
    assert normalize_bureau(raw) == expected


def test_parse_analysis_json_builds_items():
    result = parse_analysis_json(f"```json\n{json.dumps(ANALYSIS)}\n```", "Experian")

    assert result.credit_score == 642
    assert len(result.items) == 2
    collection, card = result.items
    assert collection.bureau == "Equifax"
    assert collection.balance == 1234.5
    assert collection.status == "COLLECTION"
    assert collection.removal_strategies[0].method.startswith("Debt Validation")
    assert card.account_number == "****"
    assert card.credit_limit == 1000.0
    assert [s.method for s in card.removal_strategies] == ["Goodwill"]
    assert result.summary["totalAccounts"] == 2
    assert result.summary["collections"] == 1
    assert result.summary["latePayments"] == 1


def test_parse_analysis_json_rejects_non_json():
    with pytest.raises(AnalysisParseError):
        parse_analysis_json("I could not read this report.", "Equifax")


def test_parse_uses_fallback_bureau_and_missing_score():
    result = parse_analysis_json('{"items": [{"creditorName": "X"}]}', "transunion")
    assert result.credit_score is None
    assert result.items[0].bureau == "TransUnion"
    assert result.items[0].status == "UNKNOWN"


@pytest.mark.parametrize(
    "late, expected",
    [
        (2, [2]),
        ("30 days late 2023-04", ["30 days late 2023-04"]),
        (["2023-04", "2023-05"], ["2023-04", "2023-05"]),
        (0, []),
        (None, []),
    ],
)
def test_parse_late_payments_shapes(late, expected):
    payload = json.dumps({"items": [{"creditorName": "X", "latePayments": late}]})
    result = parse_analysis_json(payload, "Equifax")
    assert result.items[0].late_payments == expected


def test_removal_strategies_for_medical_collection():
    methods = [s.method for s in generate_removal_strategies("COLLECTION", "Medical Collection", 200)]
    assert methods[0].startswith("Debt Validation")
    assert "HIPAA Privacy Violation Dispute" in methods
    assert methods[-1].startswith("7-Year")
    assert not any(m.startswith("Goodwill") for m in methods)


def test_removal_strategies_pay_for_delete_priority_depends_on_balance():
    small = generate_removal_strategies("CHARGED_OFF", "Credit Card", 300)
    large = generate_removal_strategies("CHARGED_OFF", "Credit Card", 5000)
    assert small[0].method == "Pay for Delete Negotiation" and small[0].priority == "HIGH"
    assert "full amount" in small[0].description
    assert large[0].priority == "MEDIUM"


def test_analyzer_requires_gemini():
    with pytest.raises(AnalysisError, match="GEMINI_API_KEY"):
        ReportAnalyzer(None, FakeClaude("{}")).analyze(b"%PDF", "Equifax")


def test_analyzer_uses_gemini_first():
    gemini = FakeGemini(json.dumps(ANALYSIS))
    claude = FakeClaude("{}")
    result = ReportAnalyzer(gemini, claude).analyze(b"%PDF", "Equifax")
    assert result.provider == "gemini"
    assert gemini.calls == 1
    assert claude.calls == []


def test_analyzer_falls_back_to_claude():
    gemini = FakeGemini(error=RuntimeError("quota exceeded"))
    claude = FakeClaude(json.dumps({"items": [{"creditorName": "Chase", "status": "LATE_60"}]}))
    result = ReportAnalyzer(gemini, claude).analyze(b"%PDF", "Experian")
    assert result.provider == "claude"
    assert result.items[0].bureau == "Experian"
    assert claude.calls[0]["kind"] == "analyze"


def test_analyzer_falls_back_on_unparseable_gemini_output():
    gemini = FakeGemini("not json")
    claude = FakeClaude('{"items": []}')
    assert ReportAnalyzer(gemini, claude).analyze(b"%PDF", "Equifax").provider == "claude"


def test_analyzer_reports_both_failures():
    gemini = FakeGemini(error=RuntimeError("quota exceeded"))
    claude = FakeClaude(error=RuntimeError("overloaded"))
    with pytest.raises(AnalysisError) as excinfo:
        ReportAnalyzer(gemini, claude).analyze(b"%PDF", "Equifax")
    assert "quota exceeded" in str(excinfo.value)
    assert "overloaded" in str(excinfo.value)


def test_analyzer_without_claude_surfaces_gemini_error():
    with pytest.raises(AnalysisError, match="AI analysis failed: quota"):
        ReportAnalyzer(FakeGemini(error=RuntimeError("quota"))).analyze(b"%PDF", "Equifax")


# --- action plan ----------------------------------------------------------
def _items():
    return [
        {"creditorName": "Midland", "status": "COLLECTION", "accountType": "Medical Collection", "balance": 300, "isDisputable": True},
        {"creditorName": "Capital One", "status": "CURRENT", "accountType": "Credit Card", "balance": 900, "creditLimit": 1000},
        {"creditorName": "Chase", "status": "CHARGED_OFF", "accountType": "Credit Card", "balance": 2000},
        {"creditorName": "Ford Credit", "status": "CURRENT", "accountType": "Auto", "latePayments": ["2025-03"]},
    ]


def test_build_action_plan_orders_steps():
    plan = build_action_plan("alice", "r1", _items(), 612)

    titles = [s.title for s in plan.steps]
    assert titles == [
        "Dispute Collection Accounts",
        "Challenge Medical Collections via HIPAA",
        "Negotiate Charge-Off Removal",
        "Pay Down High Credit Card Balances",
        "Send Goodwill Letters for Late Payments",
        "Set Up Automatic Payments on All Accounts",
        "File Disputes with All Three Credit Bureaus",
        "Become an Authorized User on a Strong Account",
        "Monitor Your Credit Monthly",
    ]
    assert [s.order for s in plan.steps] == list(range(1, 10))
    assert plan.title == "Your Path from 612 to 800"
    assert "Capital One (90% used)" in plan.steps[3].description
    assert "1 collection totaling $300" in plan.summary
    assert plan.summary.endswith("Follow these 9 steps in order for maximum impact.")


def test_build_action_plan_without_items():
    plan = build_action_plan("alice", None, [], None)
    assert plan.title == "Your Path to 800"
    assert [s.category for s in plan.steps] == ["PAYMENT", "CREDIT_MIX", "GENERAL"]


def test_generate_action_plan_uses_latest_score():
    store = MemoryStore()
    store.add(Collections.CREDIT_SCORES, {"userId": "alice", "score": 600, "recordedAt": "2026-01-01T00:00:00Z"})
    store.add(Collections.CREDIT_SCORES, {"userId": "alice", "score": 655, "recordedAt": "2026-06-01T00:00:00Z"})
    for item in _items():
        store.add(Collections.REPORT_ITEMS, {"userId": "alice", **item})

    plan = generate_action_plan(store, "alice", "r1")

    assert plan["title"] == "Your Path from 655 to 800"
    assert store.get(Collections.ACTION_PLANS, plan["id"])["reportId"] == "r1"
