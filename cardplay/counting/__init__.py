"""Hi-Lo card counting."""

from cardplay.counting.drill import CountingDrill
from cardplay.counting.hilo import (
    HI_LO_TAGS,
    CountTracker,
    GuessResult,
    betting_units,
    count_advantage,
    hi_lo_value,
    should_take_insurance,
)

__all__ = [
    "CountingDrill",
    "HI_LO_TAGS",
    "CountTracker",
    "GuessResult",
    "betting_units",
    "count_advantage",
    "hi_lo_value",
    "should_take_insurance",
]
