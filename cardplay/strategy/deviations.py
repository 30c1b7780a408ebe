"""Hi-Lo index plays: departures from basic strategy at a given true count."""

from dataclasses import dataclass
from typing import Mapping, NamedTuple

from cardplay.strategy.basic import Action


class DeviationKey(NamedTuple):
    """
    Composite lookup key for a deviation.

    Written "{player_total}v{dealer_upcard}" in the usual notation, e.g.
    ``DeviationKey(16, "10")`` for "16v10". ``pair`` separates a pair of
    tens from a hard 20.
    """

    player_total: int
    dealer_upcard: str  # "2".."10", "A"
    pair: bool = False

    def __str__(self) -> str:
        prefix = "TT" if self.pair and self.player_total == 20 else str(self.player_total)
        return f"{prefix}v{self.dealer_upcard}"


@dataclass(frozen=True)
class IndexPlay:
    """
    A count-based deviation.

    When the true count meets or exceeds ``true_count_threshold``, play
    ``action`` instead of ``basic_action``.
    """

    action: Action
    true_count_threshold: float
    basic_action: Action

    def should_deviate(self, true_count: float) -> bool:
        """Check if the true count reaches the index."""
        return true_count >= self.true_count_threshold

    def get_action(self, true_count: float) -> Action:
        """Return the action to play at this true count."""
        if self.should_deviate(true_count):
            return self.action
        return self.basic_action


DEVIATIONS: Mapping[DeviationKey, IndexPlay] = {
    # Stand deviations
    DeviationKey(16, "10"): IndexPlay(Action.STAND, 0, Action.HIT),
    DeviationKey(16, "9"): IndexPlay(Action.STAND, 4, Action.HIT),
    DeviationKey(15, "10"): IndexPlay(Action.STAND, 4, Action.HIT),
    DeviationKey(12, "3"): IndexPlay(Action.STAND, 2, Action.HIT),
    DeviationKey(12, "2"): IndexPlay(Action.STAND, 3, Action.HIT),
    DeviationKey(13, "2"): IndexPlay(Action.STAND, -1, Action.HIT),
    # Hit deviations
    DeviationKey(12, "4"): IndexPlay(Action.HIT, -2, Action.STAND),
    DeviationKey(12, "5"): IndexPlay(Action.HIT, -2, Action.STAND),
    DeviationKey(12, "6"): IndexPlay(Action.HIT, -1, Action.STAND),
    DeviationKey(13, "3"): IndexPlay(Action.HIT, -2, Action.STAND),
    # Double deviations
    DeviationKey(10, "10"): IndexPlay(Action.DOUBLE, 4, Action.HIT),
    DeviationKey(9, "2"): IndexPlay(Action.DOUBLE, 1, Action.HIT),
    DeviationKey(9, "7"): IndexPlay(Action.DOUBLE, 3, Action.HIT),
    DeviationKey(11, "A"): IndexPlay(Action.DOUBLE, 1, Action.HIT),
    # Split deviations
    DeviationKey(20, "5", pair=True): IndexPlay(Action.SPLIT, 5, Action.STAND),
    DeviationKey(20, "6", pair=True): IndexPlay(Action.SPLIT, 4, Action.STAND),
}


def find_index_play(
    player_total: int,
    dealer_upcard: str,
    pair: bool = False,
) -> IndexPlay | None:
    """Return the index play for a situation, regardless of the count."""
    return DEVIATIONS.get(DeviationKey(player_total, dealer_upcard, pair))


def get_deviation(
    player_total: int,
    dealer_upcard: str,
    true_count: float,
    pair: bool = False,
) -> Action | None:
    """
    Get the deviation action for a situation.

    Args:
        player_total: Player's hand total
        dealer_upcard: Dealer up-card label ("2".."10", "A")
        true_count: Current true count
        pair: Whether the hand is a pair

    Returns:
        The deviation action if the true count reaches its index, else None
        (play basic strategy)
    """
    play = find_index_play(player_total, dealer_upcard, pair)
    if play is not None and play.should_deviate(true_count):
        return play.action
    return None
