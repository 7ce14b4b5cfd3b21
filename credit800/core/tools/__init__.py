from credit800.core.tools.simulator import SCENARIO_IDS, SCENARIOS, simulate_score_change
from credit800.core.tools.statute import (
    DEBT_TYPES,
    STATE_NAMES,
    STATUTE_OF_LIMITATIONS,
    get_credit_report_removal_date,
    is_debt_expired,
)

__all__ = [
    "DEBT_TYPES",
    "SCENARIOS",
    "SCENARIO_IDS",
    "STATE_NAMES",
    "STATUTE_OF_LIMITATIONS",
    "get_credit_report_removal_date",
    "is_debt_expired",
    "simulate_score_change",
]
