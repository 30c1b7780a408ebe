"""Strategy tables, deviations and decision grading."""

from cardplay.strategy.basic import (
    Action,
    Situation,
    estimate_expected_value,
    get_all_action_evs,
    get_optimal_action,
    is_optimal_decision,
)
from cardplay.strategy.decisions import DecisionTracker
from cardplay.strategy.deviations import DEVIATIONS, DeviationKey, IndexPlay, get_deviation

__all__ = [
    "Action",
    "Situation",
    "estimate_expected_value",
    "get_all_action_evs",
    "get_optimal_action",
    "is_optimal_decision",
    "DecisionTracker",
    "DEVIATIONS",
    "DeviationKey",
    "IndexPlay",
    "get_deviation",
]
