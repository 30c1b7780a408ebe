"""Dealer drawing policy."""

from enum import Enum
from random import Random
from typing import Callable, Sequence

from cardplay.cards import Card
from cardplay.hand import Hand, calculate_total, is_soft


class DealerRuleset(Enum):
    """Dealer drawing rules."""

    CONSERVATIVE = "conservative"  # stands on all 17s
    STANDARD = "standard"  # hits soft 17
    AGGRESSIVE = "aggressive"  # hits soft 17 and sometimes hard 17/18


# House-rule draw chances for the aggressive dealer.
AGGRESSIVE_HARD_17_HIT_CHANCE = 0.35
AGGRESSIVE_HARD_18_HIT_CHANCE = 0.15


def should_dealer_hit(
    cards: Sequence[Card],
    ruleset: DealerRuleset = DealerRuleset.STANDARD,
    rng: Random | None = None,
) -> bool:
    """
    Decide whether the dealer draws another card.

    Args:
        cards: Dealer's cards
        ruleset: Dealer rules in effect
        rng: Random source, only sampled by the aggressive ruleset on hard 17/18

    Returns:
        True if the dealer should hit
    """
    total = calculate_total(cards)
    soft = is_soft(cards)

    if total < 17:
        return True

    if ruleset == DealerRuleset.CONSERVATIVE:
        return False

    if total == 17 and soft:
        return True

    if ruleset == DealerRuleset.STANDARD:
        return False

    rng = rng or Random()
    if total == 17:
        return rng.random() < AGGRESSIVE_HARD_17_HIT_CHANCE
    if total == 18 and not soft:
        return rng.random() < AGGRESSIVE_HARD_18_HIT_CHANCE
    return False


def play_dealer_hand(
    hand: Hand,
    ruleset: DealerRuleset,
    draw: Callable[[], Card],
    rng: Random | None = None,
    on_hit: Callable[[Hand], None] | None = None,
) -> Hand:
    """
    Draw cards into ``hand`` until the policy says stand.

    ``on_hit`` is called with the hand after each drawn card.
    """
    while should_dealer_hit(hand.cards, ruleset, rng):
        hand.add_card(draw())
        if on_hit is not None:
            on_hit(hand)
    return hand
