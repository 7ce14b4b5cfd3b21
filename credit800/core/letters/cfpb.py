from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from credit800.core.letters.rendering import format_letter_date, render_text


@dataclass(frozen=True)
class ComplaintType:
    id: str
    title: str
    category: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "description": self.description,
        }


COMPLAINT_TYPES = (
    ComplaintType(
        "inaccurate-reporting",
        "Inaccurate Information on Credit Report",
        "Credit reporting",
        "The credit bureau is reporting information that is inaccurate, incomplete, or unverifiable.",
    ),
    ComplaintType(
        "failure-to-investigate",
        "Failure to Properly Investigate Dispute",
        "Credit reporting",
        "The bureau failed to conduct a proper reinvestigation of your dispute or did not respond within 30 days.",
    ),
    ComplaintType(
        "failure-to-remove",
        "Failure to Remove Unverifiable Information",
        "Credit reporting",
        "The bureau failed to remove information that could not be verified during their investigation.",
    ),
    ComplaintType(
        "mixed-file",
        "Mixed Credit File / Wrong Person's Information",
        "Credit reporting",
        "Your credit report contains accounts or information belonging to another person.",
    ),
    ComplaintType(
        "furnisher-violation",
        "Furnisher Reporting Inaccurate Information",
        "Credit reporting",
        "A creditor or debt collector continues to report inaccurate information to the bureaus after being notified.",
    ),
)


def get_complaint_type(complaint_id: str) -> Optional[ComplaintType]:
    for complaint in COMPLAINT_TYPES:
        if complaint.id == complaint_id:
            return complaint
    return None


def generate_complaint_letter(
    complaint: ComplaintType,
    *,
    creditor_name: str,
    bureau: str,
    account_number: str,
    reason: str,
    consumer_name: str,
    consumer_address: str,
    original_dispute_date: Optional[str] = None,
    additional_details: Optional[str] = None,
) -> str:
    return render_text(
        "cfpb_complaint.txt",
        complaint_type=complaint.id,
        title=complaint.title,
        creditor_name=creditor_name,
        bureau=bureau,
        account_number=account_number,
        reason=reason,
        consumer_name=consumer_name,
        consumer_address=consumer_address,
        original_dispute_date=original_dispute_date,
        additional_details=additional_details,
        date=format_letter_date(),
    )
