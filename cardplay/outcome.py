"""Round outcome and payout resolution."""

from decimal import Decimal, ROUND_FLOOR
from enum import Enum


class Result(Enum):
    """Outcome of a player hand against the dealer."""

    WIN = "win"
    LOSE = "lose"
    PUSH = "push"

    def __str__(self) -> str:
        return self.value


class PayoutRuleset(Enum):
    """Payout schedules."""

    EASY = "easy"
    STANDARD = "standard"
    HARD = "hard"


# (blackjack multiplier, regular win multiplier)
PAYOUT_MULTIPLIERS: dict[PayoutRuleset, tuple[Decimal, Decimal]] = {
    PayoutRuleset.EASY: (Decimal("1.6"), Decimal("1.1")),
    PayoutRuleset.STANDARD: (Decimal("1.5"), Decimal("1")),
    PayoutRuleset.HARD: (Decimal("1.2"), Decimal("0.85")),
}


def determine_winner(
    player_total: int,
    dealer_total: int,
    player_blackjack: bool,
    dealer_blackjack: bool,
    player_busted: bool,
    dealer_busted: bool,
) -> Result:
    """
    Decide a hand's result.

    Checks run in strict order: player bust, dealer bust, blackjacks,
    then totals. A player bust loses even when the dealer busts too.
    """
    if player_busted:
        return Result.LOSE
    if dealer_busted:
        return Result.WIN
    if player_blackjack and dealer_blackjack:
        return Result.PUSH
    if player_blackjack:
        return Result.WIN
    if dealer_blackjack:
        return Result.LOSE
    if player_total > dealer_total:
        return Result.WIN
    if player_total < dealer_total:
        return Result.LOSE
    return Result.PUSH


def calculate_payout(
    bet: int,
    result: Result,
    is_blackjack: bool,
    ruleset: PayoutRuleset = PayoutRuleset.STANDARD,
) -> int:
    """
    Net coins won for a resolved hand.

    Wins are truncated to whole coins. A loss costs the full bet and a push
    returns nothing.

    Args:
        bet: Amount wagered on the hand
        result: Resolved result
        is_blackjack: Whether the winning hand is a natural
        ruleset: Payout schedule

    Returns:
        Net amount: positive for a win, ``-bet`` for a loss, 0 for a push
    """
    if result == Result.LOSE:
        return -bet
    if result == Result.PUSH:
        return 0

    blackjack_multiplier, win_multiplier = PAYOUT_MULTIPLIERS[ruleset]
    multiplier = blackjack_multiplier if is_blackjack else win_multiplier
    return int((Decimal(bet) * multiplier).to_integral_value(rounding=ROUND_FLOOR))


def surrender_loss(bet: int) -> int:
    """Net amount for a surrendered hand: half the bet, rounded down, is lost."""
    return -(bet // 2)
