"""Demo tradelines used when a report is analyzed with ``simulateData``."""

from __future__ import annotations

from typing import Any, Dict, List

from credit800.core.analysis.strategies import generate_removal_strategies

SAMPLE_SCORE = 673
SAMPLE_SCORE_BUREAU = "EQUIFAX"

_SAMPLE_ITEMS: List[Dict[str, Any]] = [
    {
        "creditorName": "Midland Credit Management",
        "originalCreditor": "Chase Bank",
        "accountNumber": "****7832",
        "accountType": "Collection",
        "balance": 1250,
        "originalBalance": 980,
        "creditLimit": None,
        "status": "COLLECTION",
        "dateOpened": "2019-03-15",
        "dateOfFirstDelinquency": "2019-08-01",
        "lastActivityDate": "2020-02-15",
        "isDisputable": True,
        "disputeReason": "Collection account from debt buyer - demand validation of original signed "
        "agreement and chain of assignment",
        "bureau": "EQUIFAX",
    },
    {
        "creditorName": "Portfolio Recovery Associates",
        "originalCreditor": "Synchrony Bank",
        "accountNumber": "****5566",
        "accountType": "Collection",
        "balance": 890,
        "originalBalance": 650,
        "creditLimit": None,
        "status": "COLLECTION",
        "dateOpened": "2018-06-20",
        "dateOfFirstDelinquency": "2018-11-01",
        "lastActivityDate": "2019-04-10",
        "isDisputable": True,
        "disputeReason": "Debt is time-barred and approaching 7-year credit report removal - dispute "
        "for early deletion",
        "bureau": "EQUIFAX",
    },
    {
        "creditorName": "LVNV Funding LLC",
        "originalCreditor": "Capital One",
        "accountNumber": "****2211",
        "accountType": "Collection",
        "balance": 3200,
        "originalBalance": 2100,
        "creditLimit": None,
        "status": "COLLECTION",
        "dateOpened": "2021-01-15",
        "dateOfFirstDelinquency": "2020-09-01",
        "lastActivityDate": "2021-06-20",
        "isDisputable": True,
        "disputeReason": "Debt buyer account with inflated balance - demand validation and itemized "
        "statement of all fees",
        "bureau": "TRANSUNION",
    },
    {
        "creditorName": "Discover",
        "originalCreditor": None,
        "accountNumber": "****3344",
        "accountType": "Credit Card",
        "balance": 4800,
        "originalBalance": None,
        "creditLimit": 5000,
        "status": "DELINQUENT",
        "dateOpened": "2017-05-10",
        "dateOfFirstDelinquency": None,
        "lastActivityDate": "2024-01-15",
        "latePayments": ["2023-06", "2023-07"],
        "isDisputable": True,
        "disputeReason": "Late payments reported incorrectly - payment was processed on time but "
        "credited late by creditor",
        "bureau": "TRANSUNION",
    },
    {
        "creditorName": "Medical Data Systems",
        "originalCreditor": "Valley Hospital",
        "accountNumber": "****8899",
        "accountType": "Medical Collection",
        "balance": 450,
        "originalBalance": 450,
        "creditLimit": None,
        "status": "COLLECTION",
        "dateOpened": "2022-08-10",
        "dateOfFirstDelinquency": "2022-03-01",
        "lastActivityDate": "2022-09-15",
        "isDisputable": True,
        "disputeReason": "Medical collection - verify HIPAA compliance and insurance coverage before paying",
        "bureau": "EXPERIAN",
    },
    {
        "creditorName": "Capital One",
        "originalCreditor": None,
        "accountNumber": "****4521",
        "accountType": "Credit Card",
        "balance": 2500,
        "originalBalance": None,
        "creditLimit": 5000,
        "status": "CURRENT",
        "dateOpened": "2019-02-15",
        "dateOfFirstDelinquency": None,
        "lastActivityDate": "2024-12-01",
        "isDisputable": True,
        "disputeReason": None,
        "bureau": "EQUIFAX",
    },
    {
        "creditorName": "Bank of America",
        "originalCreditor": None,
        "accountNumber": "****9012",
        "accountType": "Auto Loan",
        "balance": 15000,
        "originalBalance": 22000,
        "creditLimit": None,
        "status": "CURRENT",
        "dateOpened": "2022-04-10",
        "dateOfFirstDelinquency": None,
        "lastActivityDate": "2024-12-15",
        "isDisputable": False,
        "disputeReason": None,
        "bureau": "EXPERIAN",
    },
]


def sample_items(user_id: str, report_id: str) -> List[Dict[str, Any]]:
    items = []
    for base in _SAMPLE_ITEMS:
        strategies = []
        if base["isDisputable"]:
            strategies = [
                s.to_dict()
                for s in generate_removal_strategies(base["status"], base["accountType"], base["balance"])
            ]
        items.append(
            {
                "userId": user_id,
                "creditReportId": report_id,
                "latePayments": [],
                **base,
                "removalStrategies": strategies,
            }
        )
    return items
