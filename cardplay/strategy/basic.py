"""Basic strategy tables for blackjack (6 decks, dealer stands soft 17, DAS, late surrender)."""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Sequence

from cardplay.cards import Card, upcard_value
from cardplay.hand import calculate_total, is_pair, is_soft


class Action(Enum):
    """Possible player actions."""

    HIT = "hit"
    STAND = "stand"
    DOUBLE = "double"
    SPLIT = "split"
    SURRENDER = "surrender"

    def __str__(self) -> str:
        return self.value


DealerUpcard = int  # 2-11 (11 = Ace)
TableKey = tuple[int, DealerUpcard]  # (player total or pair value, dealer upcard)

DEALER_UPCARDS: tuple[int, ...] = (2, 3, 4, 5, 6, 7, 8, 9, 10, 11)

H = Action.HIT
S = Action.STAND
D = Action.DOUBLE
P = Action.SPLIT
R = Action.SURRENDER

# Columns follow DEALER_UPCARDS: 2 3 4 5 6 7 8 9 10 A
_HARD_ROWS: dict[int, tuple[Action, ...]] = {
    5: (H, H, H, H, H, H, H, H, H, H),
    6: (H, H, H, H, H, H, H, H, H, H),
    7: (H, H, H, H, H, H, H, H, H, H),
    8: (H, H, H, H, H, H, H, H, H, H),
    9: (H, D, D, D, D, H, H, H, H, H),
    10: (D, D, D, D, D, D, D, D, H, H),
    11: (D, D, D, D, D, D, D, D, D, D),
    12: (H, H, S, S, S, H, H, H, H, H),
    13: (S, S, S, S, S, H, H, H, H, H),
    14: (S, S, S, S, S, H, H, H, H, H),
    15: (S, S, S, S, S, H, H, H, R, H),
    16: (S, S, S, S, S, H, H, R, R, R),
    17: (S, S, S, S, S, S, S, S, S, S),
    18: (S, S, S, S, S, S, S, S, S, S),
    19: (S, S, S, S, S, S, S, S, S, S),
    20: (S, S, S, S, S, S, S, S, S, S),
    21: (S, S, S, S, S, S, S, S, S, S),
}

_SOFT_ROWS: dict[int, tuple[Action, ...]] = {
    13: (H, H, H, D, D, H, H, H, H, H),
    14: (H, H, H, D, D, H, H, H, H, H),
    15: (H, H, D, D, D, H, H, H, H, H),
    16: (H, H, D, D, D, H, H, H, H, H),
    17: (H, D, D, D, D, H, H, H, H, H),
    18: (S, D, D, D, D, S, S, H, H, H),
    19: (S, S, S, S, S, S, S, S, S, S),
    20: (S, S, S, S, S, S, S, S, S, S),
    21: (S, S, S, S, S, S, S, S, S, S),
}

# Keyed by the pair's card value: 10 covers any two ten-value cards, 11 is aces.
_PAIR_ROWS: dict[int, tuple[Action, ...]] = {
    2: (P, P, P, P, P, P, H, H, H, H),
    3: (P, P, P, P, P, P, H, H, H, H),
    4: (H, H, H, P, P, H, H, H, H, H),
    5: (D, D, D, D, D, D, D, D, H, H),
    6: (P, P, P, P, P, H, H, H, H, H),
    7: (P, P, P, P, P, P, H, H, H, H),
    8: (P, P, P, P, P, P, P, P, P, P),
    9: (P, P, P, P, P, S, P, P, S, S),
    10: (S, S, S, S, S, S, S, S, S, S),
    11: (P, P, P, P, P, P, P, P, P, P),
}


def _build_table(rows: Mapping[int, Sequence[Action]]) -> Mapping[TableKey, Action]:
    table: dict[TableKey, Action] = {}
    for row, actions in rows.items():
        for dealer, action in zip(DEALER_UPCARDS, actions):
            table[(row, dealer)] = action
    return table


HARD_TABLE: Mapping[TableKey, Action] = _build_table(_HARD_ROWS)
SOFT_TABLE: Mapping[TableKey, Action] = _build_table(_SOFT_ROWS)
PAIR_TABLE: Mapping[TableKey, Action] = _build_table(_PAIR_ROWS)


@dataclass(frozen=True)
class Situation:
    """Everything the advisor needs to know about a decision point."""

    player_total: int
    dealer_upcard: DealerUpcard
    is_soft: bool = False
    is_pair: bool = False
    pair_value: int | None = None
    can_double: bool = True
    can_split: bool = True
    can_surrender: bool = True

    @classmethod
    def from_hands(
        cls,
        player_cards: Sequence[Card],
        dealer_upcard: Card,
        can_double: bool = True,
        can_split: bool = True,
        can_surrender: bool = True,
    ) -> "Situation":
        """Describe a player hand facing a dealer up-card."""
        pair = is_pair(player_cards)
        return cls(
            player_total=calculate_total(player_cards),
            dealer_upcard=upcard_value(dealer_upcard),
            is_soft=is_soft(player_cards),
            is_pair=pair,
            pair_value=player_cards[0].value if pair else None,
            can_double=can_double,
            can_split=can_split,
            can_surrender=can_surrender,
        )


def get_optimal_action(situation: Situation) -> Action:
    """
    Look up the basic strategy action.

    Resolution order:
        1. Pairs (when splitting is allowed) use the pair table.
        2. Soft totals use the soft table.
        3. Everything else uses the hard table.
        4. Anything without an entry is a hit.

    A Double or Surrender the situation doesn't allow becomes a Hit.

    Args:
        situation: Player hand and dealer up-card description

    Returns:
        The recommended action
    """
    dealer = situation.dealer_upcard

    if situation.is_pair and situation.can_split and situation.pair_value is not None:
        action = PAIR_TABLE.get((situation.pair_value, dealer))
        if action is not None:
            if action == Action.DOUBLE and not situation.can_double:
                return Action.HIT
            return action

    if situation.is_soft:
        action = SOFT_TABLE.get((situation.player_total, dealer))
        if action is not None:
            if action == Action.DOUBLE and not situation.can_double:
                return Action.HIT
            return action

    action = HARD_TABLE.get((situation.player_total, dealer))
    if action is not None:
        if action == Action.DOUBLE and not situation.can_double:
            return Action.HIT
        if action == Action.SURRENDER and not situation.can_surrender:
            return Action.HIT
        return action

    return Action.HIT


_BASE_EV: dict[Action, float] = {
    Action.HIT: -0.1,
    Action.STAND: -0.05,
    Action.DOUBLE: -0.08,
    Action.SPLIT: -0.03,
    Action.SURRENDER: -0.5,
}


def estimate_expected_value(
    player_total: int,
    dealer_upcard: DealerUpcard,
    action: Action,
    is_soft: bool = False,
) -> float:
    """
    Rough expected value of an action, for advisory display only.

    This is a heuristic made of a base value per action plus a few additive
    adjustments. It is not a solved-game EV.
    """
    ev = _BASE_EV[action]

    if action == Action.STAND:
        if player_total >= 17:
            ev += 0.15
        if player_total <= 11:
            ev -= 0.3
        if dealer_upcard >= 7 and player_total < 17:
            ev -= 0.2
        if dealer_upcard <= 6 and player_total >= 12:
            ev += 0.1

    elif action == Action.HIT:
        if player_total <= 11:
            ev += 0.2
        if player_total >= 17:
            ev -= 0.4
        if is_soft and player_total <= 17:
            ev += 0.1

    elif action == Action.DOUBLE:
        if player_total == 11:
            ev += 0.15
        if player_total == 10 and dealer_upcard <= 9:
            ev += 0.1
        if is_soft and 15 <= player_total <= 17 and dealer_upcard <= 6:
            ev += 0.05

    return round(ev, 2)


def get_all_action_evs(situation: Situation) -> dict[Action, float]:
    """Heuristic EVs for hit, stand and whichever optional actions are allowed."""
    allowed = [Action.HIT, Action.STAND]
    if situation.can_double:
        allowed.append(Action.DOUBLE)
    if situation.can_split:
        allowed.append(Action.SPLIT)
    if situation.can_surrender:
        allowed.append(Action.SURRENDER)

    return {
        action: estimate_expected_value(
            situation.player_total,
            situation.dealer_upcard,
            action,
            situation.is_soft,
        )
        for action in allowed
    }


def is_optimal_decision(player_action: Action, optimal_action: Action) -> bool:
    """Check whether the player's choice matches the advised action."""
    return player_action == optimal_action
