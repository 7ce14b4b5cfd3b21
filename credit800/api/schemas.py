"""Request bodies accepted by the JSON API."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, StrictBool, confloat, conint, constr

from credit800.core.models import RESPONSE_OUTCOMES
from credit800.core.portfolio import ACCOUNT_TYPES
from credit800.core.tools import DEBT_TYPES, SCENARIO_IDS

NonEmpty = constr(strip_whitespace=True, min_length=1)
Number = confloat(allow_inf_nan=False)

Outcome = Literal[RESPONSE_OUTCOMES]  # type: ignore[valid-type]
AccountType = Literal[ACCOUNT_TYPES]  # type: ignore[valid-type]
DebtType = Literal[DEBT_TYPES]  # type: ignore[valid-type]
ScenarioId = Literal[SCENARIO_IDS]  # type: ignore[valid-type]
GoalType = Literal["credit_score", "net_worth", "debt_payoff", "savings"]


# --- reports --------------------------------------------------------------
class CreateReportRequest(BaseModel):
    fileName: NonEmpty
    fileSize: Optional[conint(ge=0)] = None
    bureau: str = "UNKNOWN"
    filePath: Optional[str] = None


class AnalyzeReportRequest(BaseModel):
    reportId: NonEmpty
    simulateData: bool = False


class CompareReportsRequest(BaseModel):
    reportId: NonEmpty = Field(validation_alias=AliasChoices("reportId", "newReportId"))
    previousReportId: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("previousReportId", "oldReportId")
    )


# --- disputes -------------------------------------------------------------
class GenerateDisputeRequest(BaseModel):
    reportItemId: NonEmpty = Field(validation_alias=AliasChoices("reportItemId", "itemId"))
    reason: Optional[str] = None
    templateId: Optional[str] = None


class EscalateDisputeRequest(BaseModel):
    disputeId: NonEmpty
    round: int


class DisputeResponseRequest(BaseModel):
    outcome: Optional[Outcome] = Field(
        default=None, validation_alias=AliasChoices("outcome", "bureauResponseOutcome")
    )
    notes: Optional[str] = Field(default=None, validation_alias=AliasChoices("notes", "bureauResponse"))
    responseReceivedAt: Optional[str] = None


class ParseResponseTextRequest(BaseModel):
    text: NonEmpty


# --- mail -----------------------------------------------------------------
class MailDisputeRequest(BaseModel):
    disputeId: NonEmpty
    provider: Optional[Literal["click2mail", "lob", "postgrid"]] = None


class RefreshMailRequest(BaseModel):
    disputeId: Optional[str] = None


class FromAddress(BaseModel):
    name: NonEmpty
    address_line1: NonEmpty
    address_line2: str = ""
    address_city: NonEmpty
    address_state: NonEmpty
    address_zip: NonEmpty


class CfpbMailRequest(BaseModel):
    complaintText: NonEmpty
    fromAddress: FromAddress


# --- letters --------------------------------------------------------------
class LetterPreviewRequest(BaseModel):
    templateId: NonEmpty
    consumerName: NonEmpty
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    creditorName: NonEmpty
    accountNumber: str = ""
    bureau: Optional[str] = None
    reason: Optional[str] = None
    offerAmount: Optional[str] = None
    date: Optional[str] = None
    format: Literal["text", "html"] = "text"


class CfpbLetterRequest(BaseModel):
    disputeId: NonEmpty
    complaintType: NonEmpty
    additionalDetails: Optional[str] = None


# --- plans, goals, scores, notifications, referrals -----------------------
class GeneratePlanRequest(BaseModel):
    reportId: Optional[str] = None


class PlanStepUpdate(BaseModel):
    completed: Optional[StrictBool] = None


class GoalCreate(BaseModel):
    type: GoalType
    title: NonEmpty
    target: Number
    current: Number
    unit: NonEmpty
    deadline: Optional[str] = None


class GoalUpdate(BaseModel):
    title: Optional[NonEmpty] = None
    target: Optional[Number] = None
    current: Optional[Number] = None
    isCompleted: Optional[StrictBool] = None
    deadline: Optional[str] = None


class ScoreCreate(BaseModel):
    score: conint(ge=300, le=850)
    source: str = "Manual Entry"
    bureau: Optional[str] = None
    recordedAt: Optional[str] = None
    factors: Optional[List[Any]] = None


class NotificationCreate(BaseModel):
    type: str = "general"
    title: NonEmpty
    message: NonEmpty
    actionUrl: Optional[str] = None


class NotificationUpdate(BaseModel):
    notificationId: Optional[str] = None
    ids: Optional[List[str]] = None
    read: StrictBool = True


class ReferralApply(BaseModel):
    referralCode: NonEmpty


# --- portfolio ------------------------------------------------------------
class AccountCreate(BaseModel):
    name: NonEmpty
    institution: NonEmpty
    type: AccountType
    balance: Number
    currency: str = "USD"


class AccountUpdate(BaseModel):
    name: Optional[NonEmpty] = None
    institution: Optional[NonEmpty] = None
    isHidden: Optional[StrictBool] = None
    balance: Optional[Number] = None


class PlaidExchangeRequest(BaseModel):
    publicToken: NonEmpty
    institutionId: str = ""
    institutionName: str = "Unknown"
    accounts: List[Dict[str, Any]]


class PlaidSyncRequest(BaseModel):
    plaidItemId: Optional[str] = None


# --- users ----------------------------------------------------------------
class ProfileRequest(BaseModel):
    fullName: NonEmpty
    dateOfBirth: NonEmpty
    address: NonEmpty
    address2: str = ""
    city: NonEmpty
    state: NonEmpty
    zip: NonEmpty


class WelcomeRequest(BaseModel):
    name: str = ""


# --- tools ----------------------------------------------------------------
class SimulateRequest(BaseModel):
    currentScore: conint(ge=300, le=850)
    scenarioId: ScenarioId
    params: Dict[str, Any] = Field(default_factory=dict)


class StatuteRequest(BaseModel):
    state: constr(strip_whitespace=True, to_upper=True, min_length=2, max_length=2)
    debtType: DebtType
    lastActivityDate: date
    firstDelinquencyDate: Optional[date] = None
