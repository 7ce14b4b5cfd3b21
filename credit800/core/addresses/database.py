"""Dispute mailing addresses for collectors, creditors and the three bureaus."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class CreditorAddress:
    name: str
    address: str
    city: str
    state: str
    zip: str
    department: Optional[str] = None
    source: str = "database"
    confidence: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "CreditorAddress":
        return cls(
            name=str(data.get("name", "")),
            address=str(data.get("address", "")),
            city=str(data.get("city", "")),
            state=str(data.get("state", "")),
            zip=str(data.get("zip", "")),
            department=data.get("department") or None,
            source=str(data.get("source", "database")),
            confidence=data.get("confidence"),
        )


def _entry(name, address, city, state, zip_code, department=None) -> CreditorAddress:
    return CreditorAddress(
        name=name, address=address, city=city, state=state, zip=zip_code, department=department
    )


CREDITOR_DATABASE: Dict[str, CreditorAddress] = {
    # debt collectors and debt buyers
    "midland credit management": _entry(
        "Midland Credit Management", "P.O. Box 60578", "Los Angeles", "CA", "90060",
        "Consumer Dispute Department",
    ),
    "portfolio recovery associates": _entry(
        "Portfolio Recovery Associates", "P.O. Box 12914", "Norfolk", "VA", "23541",
        "Dispute Resolution Department",
    ),
    "lvnv funding": _entry("LVNV Funding LLC", "P.O. Box 25028", "Greenville", "SC", "29616"),
    "encore capital group": _entry(
        "Encore Capital Group", "P.O. Box 60578", "Los Angeles", "CA", "90060"
    ),
    "cavalry spv": _entry(
        "Cavalry SPV I LLC", "500 Summit Lake Drive, Suite 400", "Valhalla", "NY", "10595"
    ),
    "convergent outsourcing": _entry(
        "Convergent Outsourcing", "P.O. Box 9004", "Renton", "WA", "98057"
    ),
    "ic system": _entry(
        "IC System Inc.", "P.O. Box 64378", "St. Paul", "MN", "55164", "Consumer Relations"
    ),
    "gc services": _entry("GC Services", "P.O. Box 550460", "Jacksonville", "FL", "32255"),
    "national enterprise systems": _entry(
        "National Enterprise Systems", "P.O. Box 36475", "Cincinnati", "OH", "45236"
    ),
    "enhanced recovery company": _entry(
        "Enhanced Recovery Company (ERC)", "8014 Bayberry Road", "Jacksonville", "FL", "32256"
    ),
    "transworld systems": _entry(
        "Transworld Systems Inc.", "P.O. Box 17289", "Plantation", "FL", "33318"
    ),
    "cbe group": _entry("CBE Group", "1309 Technology Parkway", "Cedar Falls", "IA", "50613"),
    "penn credit": _entry("Penn Credit Corporation", "P.O. Box 530700", "Atlanta", "GA", "30353"),
    "allied interstate": _entry(
        "Allied Interstate LLC", "P.O. Box 2466", "Minneapolis", "MN", "55402"
    ),
    "mrs associates": _entry(
        "MRS Associates", "300 Jericho Quadrangle, Suite 130", "Jericho", "NY", "11753"
    ),
    "cach": _entry("CACH LLC", "P.O. Box 10623", "Denver", "CO", "80250"),
    "crown asset management": _entry(
        "Crown Asset Management LLC", "P.O. Box 25028", "Duluth", "GA", "30096"
    ),
    "unifin": _entry("Unifin Inc.", "P.O. Box 33003", "Detroit", "MI", "48232"),
    "asset acceptance": _entry("Asset Acceptance LLC", "P.O. Box 2036", "Warren", "MI", "48090"),
    "weltman weinberg reis": _entry(
        "Weltman, Weinberg & Reis", "323 W. Lakeside Avenue, Suite 200", "Cleveland", "OH", "44113"
    ),
    "medical data systems": _entry(
        "Medical Data Systems", "P.O. Box 4209", "Lisle", "IL", "60532"
    ),
    "first collection": _entry(
        "First Collection Inc.", "P.O. Box 420527", "Atlanta", "GA", "30342"
    ),
    "nationwide credit": _entry(
        "Nationwide Credit Inc.", "P.O. Box 6529", "Columbia", "SC", "29260"
    ),
    "credit corp solutions": _entry(
        "Credit Corp Solutions", "P.O. Box 4044", "Concord", "CA", "94524"
    ),
    "jefferson capital systems": _entry(
        "Jefferson Capital Systems", "P.O. Box 3043", "St. Cloud", "MN", "56303"
    ),
    # original creditors, used for goodwill and direct disputes
    "capital one": _entry(
        "Capital One", "P.O. Box 30285", "Salt Lake City", "UT", "84130",
        "Credit Bureau Dispute Department",
    ),
    "chase": _entry(
        "JPMorgan Chase", "P.O. Box 15298", "Wilmington", "DE", "19850", "Credit Bureau Disputes"
    ),
    "jpmorgan chase": _entry(
        "JPMorgan Chase", "P.O. Box 15298", "Wilmington", "DE", "19850", "Credit Bureau Disputes"
    ),
    "bank of america": _entry(
        "Bank of America", "P.O. Box 982234", "El Paso", "TX", "79998", "Credit Card Disputes"
    ),
    "discover": _entry(
        "Discover Financial Services", "P.O. Box 30943", "Salt Lake City", "UT", "84130",
        "Billing Disputes",
    ),
    "synchrony bank": _entry("Synchrony Bank", "P.O. Box 965264", "Orlando", "FL", "32896"),
    "wells fargo": _entry(
        "Wells Fargo", "P.O. Box 14517", "Des Moines", "IA", "50306",
        "Credit Bureau Dispute Resolution",
    ),
    "citibank": _entry(
        "Citibank", "P.O. Box 6000", "Sioux Falls", "SD", "57117", "Credit Bureau Disputes"
    ),
    "american express": _entry(
        "American Express", "P.O. Box 981540", "El Paso", "TX", "79998", "Credit Bureau Unit"
    ),
    # bureaus
    "equifax": _entry(
        "Equifax Information Services LLC", "P.O. Box 740256", "Atlanta", "GA", "30374",
        "Consumer Dispute Center",
    ),
    "experian": _entry(
        "Experian", "P.O. Box 4500", "Allen", "TX", "75013", "Consumer Dispute Center"
    ),
    "transunion": _entry(
        "TransUnion LLC", "P.O. Box 2000", "Chester", "PA", "19016", "Consumer Dispute Center"
    ),
}


ALIASES: Dict[str, str] = {
    "pra": "portfolio recovery associates",
    "mcm": "midland credit management",
    "erc": "enhanced recovery company",
    "bofa": "bank of america",
    "boa": "bank of america",
    "amex": "american express",
    "citi": "citibank",
    "jpm": "jpmorgan chase",
    "jp morgan": "jpmorgan chase",
    "cap one": "capital one",
    "tsi": "transworld systems",
    "nci": "nationwide credit",
    "jcs": "jefferson capital systems",
    "cavalry portfolio": "cavalry spv",
    "cavalry portfolio services": "cavalry spv",
    "synchrony": "synchrony bank",
    "discover card": "discover",
    "discover bank": "discover",
    "chase bank": "chase",
    "wells fargo bank": "wells fargo",
}


CFPB_ADDRESS = CreditorAddress(
    name="Consumer Financial Protection Bureau",
    address="PO Box 27170",
    city="Washington",
    state="DC",
    zip="20038",
)
