from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional

DEBT_TYPES = ("written", "oral", "promissory", "openEnded")
CREDIT_REPORTING_YEARS = 7

# years per debt type: written, oral, promissory, open-ended
STATUTE_OF_LIMITATIONS: Dict[str, Dict[str, int]] = {
    "AL": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 3},
    "AK": {"written": 3, "oral": 3, "promissory": 3, "openEnded": 3},
    "AZ": {"written": 6, "oral": 3, "promissory": 6, "openEnded": 6},
    "AR": {"written": 5, "oral": 3, "promissory": 5, "openEnded": 5},
    "CA": {"written": 4, "oral": 2, "promissory": 4, "openEnded": 4},
    "CO": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "CT": {"written": 6, "oral": 3, "promissory": 6, "openEnded": 6},
    "DE": {"written": 3, "oral": 3, "promissory": 3, "openEnded": 3},
    "DC": {"written": 3, "oral": 3, "promissory": 3, "openEnded": 3},
    "FL": {"written": 5, "oral": 4, "promissory": 5, "openEnded": 4},
    "GA": {"written": 6, "oral": 4, "promissory": 6, "openEnded": 4},
    "HI": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "ID": {"written": 5, "oral": 4, "promissory": 5, "openEnded": 5},
    "IL": {"written": 5, "oral": 5, "promissory": 5, "openEnded": 5},
    "IN": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "IA": {"written": 5, "oral": 5, "promissory": 5, "openEnded": 5},
    "KS": {"written": 5, "oral": 3, "promissory": 5, "openEnded": 5},
    "KY": {"written": 5, "oral": 5, "promissory": 5, "openEnded": 5},
    "LA": {"written": 3, "oral": 3, "promissory": 3, "openEnded": 3},
    "ME": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "MD": {"written": 3, "oral": 3, "promissory": 3, "openEnded": 3},
    "MA": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "MI": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "MN": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "MS": {"written": 3, "oral": 3, "promissory": 3, "openEnded": 3},
    "MO": {"written": 5, "oral": 5, "promissory": 5, "openEnded": 5},
    "MT": {"written": 5, "oral": 5, "promissory": 5, "openEnded": 5},
    "NE": {"written": 5, "oral": 4, "promissory": 5, "openEnded": 5},
    "NV": {"written": 6, "oral": 4, "promissory": 6, "openEnded": 4},
    "NH": {"written": 3, "oral": 3, "promissory": 3, "openEnded": 3},
    "NJ": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "NM": {"written": 6, "oral": 4, "promissory": 6, "openEnded": 6},
    "NY": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "NC": {"written": 3, "oral": 3, "promissory": 3, "openEnded": 3},
    "ND": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "OH": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "OK": {"written": 5, "oral": 3, "promissory": 5, "openEnded": 5},
    "OR": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "PA": {"written": 4, "oral": 4, "promissory": 4, "openEnded": 4},
    "RI": {"written": 10, "oral": 10, "promissory": 10, "openEnded": 10},
    "SC": {"written": 3, "oral": 3, "promissory": 3, "openEnded": 3},
    "SD": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "TN": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "TX": {"written": 4, "oral": 4, "promissory": 4, "openEnded": 4},
    "UT": {"written": 6, "oral": 4, "promissory": 6, "openEnded": 6},
    "VT": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "VA": {"written": 5, "oral": 3, "promissory": 5, "openEnded": 5},
    "WA": {"written": 6, "oral": 3, "promissory": 6, "openEnded": 6},
    "WV": {"written": 10, "oral": 5, "promissory": 10, "openEnded": 10},
    "WI": {"written": 6, "oral": 6, "promissory": 6, "openEnded": 6},
    "WY": {"written": 8, "oral": 8, "promissory": 8, "openEnded": 8},
}

STATE_NAMES: Dict[str, str] = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas", "CA": "California",
    "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware", "DC": "District of Columbia",
    "FL": "Florida", "GA": "Georgia", "HI": "Hawaii", "ID": "Idaho", "IL": "Illinois",
    "IN": "Indiana", "IA": "Iowa", "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana",
    "ME": "Maine", "MD": "Maryland", "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota",
    "MS": "Mississippi", "MO": "Missouri", "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
    "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico", "NY": "New York",
    "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio", "OK": "Oklahoma", "OR": "Oregon",
    "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina", "SD": "South Dakota",
    "TN": "Tennessee", "TX": "Texas", "UT": "Utah", "VT": "Vermont", "VA": "Virginia",
    "WA": "Washington", "WV": "West Virginia", "WI": "Wisconsin", "WY": "Wyoming",
}


def add_years(value: date, years: int) -> date:
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        # Feb 29 onto a non-leap year
        return value.replace(year=value.year + years, day=28)


@dataclass
class DebtExpiry:
    expired: bool
    expiration_date: Optional[date]
    days_remaining: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "expired": self.expired,
            "expirationDate": self.expiration_date.isoformat() if self.expiration_date else None,
            "daysRemaining": self.days_remaining,
        }


def is_debt_expired(
    state: str, debt_type: str, last_activity: date, *, today: Optional[date] = None
) -> DebtExpiry:
    """Whether the collection lawsuit window for a debt has closed.

    Unknown states report ``days_remaining=-1`` and no expiration date.
    """

    sol = STATUTE_OF_LIMITATIONS.get((state or "").upper())
    if sol is None or debt_type not in sol:
        return DebtExpiry(expired=False, expiration_date=None, days_remaining=-1)

    today = today or date.today()
    expiration = add_years(last_activity, sol[debt_type])
    expired = today > expiration
    return DebtExpiry(
        expired=expired,
        expiration_date=expiration,
        days_remaining=0 if expired else (expiration - today).days,
    )


def get_credit_report_removal_date(first_delinquency: date) -> date:
    return add_years(first_delinquency, CREDIT_REPORTING_YEARS)
