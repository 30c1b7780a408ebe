"""Action guard predicates.

Callers check these before asking the session to act. Affordability is
judged against whatever balance the wallet reports; the engine never
tracks money itself.
"""

from typing import Sequence

from cardplay.cards import Card
from cardplay.hand import is_pair


def can_double(cards: Sequence[Card], bet: int, balance: float) -> bool:
    """Two-card hand and enough balance to match the bet."""
    return len(cards) == 2 and balance >= bet


def can_split(cards: Sequence[Card], bet: int, balance: float) -> bool:
    """A pair and enough balance to fund the second hand."""
    return is_pair(cards) and balance >= bet


def can_surrender(cards: Sequence[Card]) -> bool:
    """Only the original two cards can be surrendered."""
    return len(cards) == 2
