from __future__ import annotations

from typing import List

from credit800.core.models import RemovalStrategy


def _flags(status: str, account_type: str) -> dict:
    status = (status or "").upper()
    account_type = (account_type or "").lower()
    collection = "COLLECTION" in status or "collection" in account_type
    return {
        "collection": collection,
        "charge_off": "CHARGE" in status or "WRITTEN" in status,
        "medical": "medical" in account_type,
        "late": "LATE" in status or "DELINQUENT" in status or "PAST" in status,
    }


def generate_removal_strategies(status: str, account_type: str, balance: float) -> List[RemovalStrategy]:
    """Suggested removal approaches for a negative tradeline, best first."""

    flags = _flags(status, account_type)
    strategies: List[RemovalStrategy] = []

    if flags["collection"]:
        strategies.append(
            RemovalStrategy(
                "Debt Validation Letter (FDCPA Section 809)",
                "Send within 30 days. Demand original creditor name, account number, amount "
                "breakdown, and proof collector owns the debt.",
                "HIGH",
                "65-75%",
            )
        )
    if flags["collection"] or flags["charge_off"]:
        offer = "full amount" if balance < 500 else "30-50% of balance"
        strategies.append(
            RemovalStrategy(
                "Pay for Delete Negotiation",
                f"Offer to pay {offer} in exchange for complete removal. Always get the "
                "agreement in writing first.",
                "HIGH" if balance < 1000 else "MEDIUM",
                "40-60%",
            )
        )
    if flags["medical"]:
        strategies.append(
            RemovalStrategy(
                "HIPAA Privacy Violation Dispute",
                "Demand proof of HIPAA-compliant authorization. Many medical collections violate HIPAA.",
                "HIGH",
                "50-70%",
            )
        )
    strategies.append(
        RemovalStrategy(
            "Credit Bureau Dispute (FCRA Section 611)",
            "File disputes with Equifax, Experian, and TransUnion citing specific inaccuracies. "
            "Bureau has 30 days to investigate or must delete.",
            "HIGH",
            "30-40%",
        )
    )
    if flags["late"]:
        strategies.append(
            RemovalStrategy(
                "Goodwill Adjustment Letter",
                "Write to original creditor's executive office requesting removal as a goodwill gesture.",
                "MEDIUM",
                "15-25%",
            )
        )
    strategies.append(
        RemovalStrategy(
            "7-Year Reporting Limit (FCRA Section 605)",
            "Verify reported date is accurate. If date has been re-aged, dispute as FCRA violation.",
            "MEDIUM",
            "35-45%",
        )
    )
    return strategies
