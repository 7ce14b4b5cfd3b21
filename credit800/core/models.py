from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class Collections:
    USERS = "users"
    CREDIT_REPORTS = "creditReports"
    REPORT_ITEMS = "reportItems"
    DISPUTES = "disputes"
    CREDIT_SCORES = "creditScores"
    ACTION_PLANS = "actionPlans"
    REPORT_CHANGES = "reportChanges"
    NOTIFICATIONS = "notifications"
    PORTFOLIO_ACCOUNTS = "portfolioAccounts"
    PORTFOLIO_SNAPSHOTS = "portfolioSnapshots"
    PLAID_ITEMS = "plaidItems"
    GOALS = "goals"
    REFERRALS = "referrals"


USER_OWNED_COLLECTIONS = (
    Collections.CREDIT_REPORTS,
    Collections.REPORT_ITEMS,
    Collections.DISPUTES,
    Collections.CREDIT_SCORES,
    Collections.ACTION_PLANS,
    Collections.REPORT_CHANGES,
    Collections.NOTIFICATIONS,
    Collections.PORTFOLIO_ACCOUNTS,
    Collections.PORTFOLIO_SNAPSHOTS,
    Collections.PLAID_ITEMS,
    Collections.GOALS,
)


class ReportStatus:
    UPLOADED = "UPLOADED"
    ANALYZING = "ANALYZING"
    ANALYZED = "ANALYZED"
    ERROR = "ERROR"


class DisputeStatus:
    DRAFT = "DRAFT"
    SENT = "SENT"
    RESOLVED = "RESOLVED"


class MailStatus:
    SUBMITTED = "SUBMITTED"
    IN_PRODUCTION = "IN_PRODUCTION"
    MAILED = "MAILED"
    IN_TRANSIT = "IN_TRANSIT"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    RETURNED = "RETURNED"
    RE_ROUTED = "RE_ROUTED"
    ERROR = "ERROR"

    FINAL = frozenset({DELIVERED, RETURNED, ERROR})


RESPONSE_OUTCOMES = ("deleted", "verified", "updated", "no_response")

BUREAUS = ("Equifax", "Experian", "TransUnion")


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class RemovalStrategy:
    method: str
    description: str
    priority: str
    success_rate: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RemovalStrategy":
        return cls(
            method=str(data.get("method", "")),
            description=str(data.get("description", "")),
            priority=str(data.get("priority", "MEDIUM")),
            success_rate=str(data.get("successRate", data.get("success_rate", ""))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "description": self.description,
            "priority": self.priority,
            "successRate": self.success_rate,
        }


@dataclass
class ReportItem:
    """One tradeline extracted from a credit report."""

    creditor_name: str
    account_number: str
    account_type: str
    balance: float
    status: str
    bureau: str
    original_creditor: Optional[str] = None
    original_balance: Optional[float] = None
    credit_limit: Optional[float] = None
    date_opened: Optional[str] = None
    date_of_first_delinquency: Optional[str] = None
    last_activity_date: Optional[str] = None
    late_payments: List[Any] = field(default_factory=list)
    is_disputable: bool = True
    dispute_reason: str = "Request validation of debt"
    removal_strategies: List[RemovalStrategy] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "creditorName": self.creditor_name,
            "originalCreditor": self.original_creditor,
            "accountNumber": self.account_number,
            "accountType": self.account_type,
            "balance": self.balance,
            "originalBalance": self.original_balance,
            "creditLimit": self.credit_limit,
            "status": self.status,
            "dateOpened": self.date_opened,
            "dateOfFirstDelinquency": self.date_of_first_delinquency,
            "lastActivityDate": self.last_activity_date,
            "latePayments": list(self.late_payments),
            "isDisputable": self.is_disputable,
            "disputeReason": self.dispute_reason,
            "removalStrategies": [s.to_dict() for s in self.removal_strategies],
            "bureau": self.bureau,
        }


@dataclass
class Dispute:
    user_id: str
    report_item_id: Optional[str]
    creditor_name: str
    account_number: str
    bureau: str
    reason: str
    letter_content: str
    template_id: str
    creditor_address: Optional[Dict[str, Any]] = None
    status: str = DisputeStatus.DRAFT
    escalation_round: Optional[int] = None
    original_dispute_id: Optional[str] = None
    created_at: str = field(default_factory=utcnow_iso)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "userId": self.user_id,
            "reportItemId": self.report_item_id,
            "creditorName": self.creditor_name,
            "accountNumber": self.account_number,
            "bureau": self.bureau,
            "reason": self.reason,
            "letterContent": self.letter_content,
            "templateId": self.template_id,
            "creditorAddress": self.creditor_address,
            "status": self.status,
            "createdAt": self.created_at,
        }
        if self.escalation_round is not None:
            data["escalationRound"] = self.escalation_round
            data["originalDisputeId"] = self.original_dispute_id
        return data


@dataclass
class PlanStep:
    order: int
    title: str
    description: str
    category: str
    impact: str
    timeframe: str
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order": self.order,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "impact": self.impact,
            "timeframe": self.timeframe,
            "completed": self.completed,
        }


@dataclass
class ActionPlan:
    user_id: str
    report_id: Optional[str]
    title: str
    summary: str
    steps: List[PlanStep] = field(default_factory=list)
    created_at: str = field(default_factory=utcnow_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "reportId": self.report_id,
            "title": self.title,
            "summary": self.summary,
            "steps": [s.to_dict() for s in self.steps],
            "createdAt": self.created_at,
        }
