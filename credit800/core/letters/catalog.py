from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from credit800.core.letters.rendering import format_letter_date, render_text

TEMPLATE_CATEGORIES = [
    {"id": "bureau_dispute", "label": "Bureau Disputes"},
    {"id": "goodwill", "label": "Goodwill Letters"},
    {"id": "pay_for_delete", "label": "Pay for Delete"},
    {"id": "debt_validation", "label": "Debt Validation"},
    {"id": "cease_desist", "label": "Cease & Desist"},
    {"id": "method_of_verification", "label": "Method of Verification"},
    {"id": "inquiry_removal", "label": "Inquiry Removal"},
]


@dataclass
class LetterParams:
    """Values substituted into a dispute letter template."""

    consumer_name: str
    address: str
    city: str
    state: str
    zip: str
    creditor_name: str
    account_number: str
    bureau: Optional[str] = None
    reason: Optional[str] = None
    date: Optional[str] = None
    balance_display: Optional[str] = None
    offer_amount: Optional[str] = None
    recipient_lines: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict) -> "LetterParams":
        return cls(
            consumer_name=data.get("consumerName", ""),
            address=data.get("address", ""),
            city=data.get("city", ""),
            state=data.get("state", ""),
            zip=data.get("zip", ""),
            creditor_name=data.get("creditorName", ""),
            account_number=data.get("accountNumber", ""),
            bureau=data.get("bureau"),
            reason=data.get("reason"),
            date=data.get("date"),
            offer_amount=data.get("offerAmount"),
        )

    def to_context(self) -> Dict:
        return {
            "consumer_name": self.consumer_name,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "creditor_name": self.creditor_name,
            "account_number": self.account_number,
            "bureau": self.bureau,
            "reason": self.reason,
            "date": self.date or format_letter_date(),
            "balance_display": self.balance_display,
            "offer_amount": self.offer_amount,
            "recipient_lines": list(self.recipient_lines),
        }


@dataclass(frozen=True)
class LetterTemplate:
    id: str
    title: str
    category: str
    category_label: str
    description: str
    use_case: str
    legal_basis: str
    template_file: str
    # bureau letters go to the bureau; the rest go to the creditor or collector
    addressed_to_bureau: bool = False

    def generate(self, params: LetterParams) -> str:
        return render_text(self.template_file, **params.to_context())

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "categoryLabel": self.category_label,
            "description": self.description,
            "useCase": self.use_case,
            "legalBasis": self.legal_basis,
        }


LETTER_TEMPLATES: List[LetterTemplate] = [
    LetterTemplate(
        id="bureau-dispute-inaccurate",
        title="Bureau Dispute — Inaccurate Information",
        category="bureau_dispute",
        category_label="Bureau Dispute",
        description="Formally dispute an account that contains inaccurate information on your credit report with the reporting bureau.",
        use_case="Use when a bureau is reporting incorrect balance, status, or account details.",
        legal_basis="FCRA §611 (15 U.S.C. § 1681i)",
        template_file="bureau_dispute_inaccurate.txt",
        addressed_to_bureau=True,
    ),
    LetterTemplate(
        id="goodwill-late-payment",
        title="Goodwill Letter — Late Payment Removal",
        category="goodwill",
        category_label="Goodwill",
        description="Request that a creditor remove a late payment from your credit report as a goodwill gesture, citing your otherwise positive history.",
        use_case="Use when you have an isolated late payment on an otherwise good account.",
        legal_basis="Voluntary creditor discretion (no statutory requirement)",
        template_file="goodwill_late_payment.txt",
    ),
    LetterTemplate(
        id="pay-for-delete",
        title="Pay for Delete Agreement Request",
        category="pay_for_delete",
        category_label="Pay for Delete",
        description="Offer to pay an outstanding balance in exchange for deletion of the negative entry from your credit report.",
        use_case="Use when negotiating with a collector on an unpaid collection account.",
        legal_basis="Creditor/collector discretion; FDCPA compliance required",
        template_file="pay_for_delete.txt",
    ),
    LetterTemplate(
        id="debt-validation",
        title="Debt Validation Request",
        category="debt_validation",
        category_label="Debt Validation",
        description="Request that a debt collector provide complete documentation validating the debt before you acknowledge or pay it.",
        use_case="Use within 30 days of receiving initial collection contact.",
        legal_basis="FDCPA §809 (15 U.S.C. § 1692g)",
        template_file="debt_validation.txt",
    ),
    LetterTemplate(
        id="cease-desist",
        title="Cease and Desist Letter",
        category="cease_desist",
        category_label="Cease & Desist",
        description="Demand that a debt collector stop all communication with you regarding a particular debt.",
        use_case="Use when harassed by a collector you want to stop contacting you.",
        legal_basis="FDCPA §805(c) (15 U.S.C. § 1692c(c))",
        template_file="cease_desist.txt",
    ),
    LetterTemplate(
        id="method-of-verification",
        title="Method of Verification Request",
        category="method_of_verification",
        category_label="Method of Verification",
        description="After a bureau claims it verified a disputed item, request the exact method and evidence used to verify the information.",
        use_case="Use after a bureau returns a 'verified' result on your dispute without explanation.",
        legal_basis="FCRA §611(a)(6)(B)(iii) (15 U.S.C. § 1681i)",
        template_file="method_of_verification.txt",
        addressed_to_bureau=True,
    ),
    LetterTemplate(
        id="inquiry-removal",
        title="Unauthorized Inquiry Removal Request",
        category="inquiry_removal",
        category_label="Inquiry Removal",
        description="Request removal of a hard inquiry you did not authorize from your credit report.",
        use_case="Use when you see a hard inquiry you do not recognize or did not consent to.",
        legal_basis="FCRA §604 (15 U.S.C. § 1681b) — permissible purpose requirement",
        template_file="inquiry_removal.txt",
        addressed_to_bureau=True,
    ),
]

_BY_ID = {t.id: t for t in LETTER_TEMPLATES}


def get_template_by_id(template_id: str) -> Optional[LetterTemplate]:
    return _BY_ID.get(template_id)


def templates_for_category(category: str | None) -> List[LetterTemplate]:
    if not category or category == "all":
        return list(LETTER_TEMPLATES)
    return [t for t in LETTER_TEMPLATES if t.category == category]
