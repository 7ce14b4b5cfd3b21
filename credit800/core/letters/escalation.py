from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from credit800.core.letters.rendering import format_letter_date, render_text


@dataclass(frozen=True)
class EscalationTemplate:
    round: int
    title: str
    description: str
    template_file: str

    def generate_letter(
        self,
        *,
        creditor_name: str,
        bureau: str,
        account_number: str,
        original_dispute_date: str,
        reason: str,
        consumer_name: str,
        consumer_address: str,
        date: Optional[str] = None,
    ) -> str:
        return render_text(
            self.template_file,
            creditor_name=creditor_name,
            bureau=bureau,
            account_number=account_number,
            original_dispute_date=original_dispute_date,
            reason=reason,
            consumer_name=consumer_name,
            consumer_address=consumer_address,
            date=date or format_letter_date(),
        )


ESCALATION_TEMPLATES = (
    EscalationTemplate(
        round=2,
        title="Method of Verification Demand",
        description=(
            "Demand the bureau provide the method used to verify the disputed "
            "information, as required under FCRA Section 611(a)(6)(B)(iii)."
        ),
        template_file="escalation_round_2.txt",
    ),
    EscalationTemplate(
        round=3,
        title="Intent to File Regulatory Complaints",
        description=(
            "Final demand letter warning of CFPB complaint and potential legal "
            "action if the item is not resolved."
        ),
        template_file="escalation_round_3.txt",
    ),
)


def get_escalation_template(round_number: int) -> Optional[EscalationTemplate]:
    for template in ESCALATION_TEMPLATES:
        if template.round == round_number:
            return template
    return None
