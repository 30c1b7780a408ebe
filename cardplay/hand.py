"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from typing import Iterator, Sequence

from cardplay.cards import Card
from cardplay.outcome import Result


def calculate_total(cards: Sequence[Card]) -> int:
    """
    Calculate the best hand total.

    Every Ace starts at 11 and is dropped to 1, one at a time, while the
    total is over 21. Returns the best total <= 21, or the busted total.
    """
    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
        total += card.value

    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return total


def is_soft(cards: Sequence[Card]) -> bool:
    """
    Check if the hand is soft.

    True when an Ace is present and the sum with every Ace counted as 11
    does not bust. [A, A, 9] is therefore hard.
    """
    has_ace = False
    total = 0
    for card in cards:
        if card.is_ace:
            has_ace = True
        total += card.value
    return has_ace and total <= 21


def is_pair(cards: Sequence[Card]) -> bool:
    """Check for exactly two cards of the same rank label."""
    return len(cards) == 2 and cards[0].label == cards[1].label


def is_blackjack(cards: Sequence[Card]) -> bool:
    """Check for a two-card 21."""
    return len(cards) == 2 and calculate_total(cards) == 21


def is_busted(cards: Sequence[Card]) -> bool:
    """Check if the total is over 21."""
    return calculate_total(cards) > 21


@dataclass
class Hand:
    """A blackjack hand. Derived values are recomputed from the cards on every access."""

    cards: list[Card] = field(default_factory=list)
    bet: int = 0
    is_doubled: bool = False
    is_split_hand: bool = False
    is_surrendered: bool = False
    is_complete: bool = False
    result: Result | None = None

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    @property
    def value(self) -> int:
        return calculate_total(self.cards)

    @property
    def is_soft(self) -> bool:
        return is_soft(self.cards)

    @property
    def is_hard(self) -> bool:
        return not self.is_soft

    @property
    def is_pair(self) -> bool:
        return is_pair(self.cards)

    @property
    def is_blackjack(self) -> bool:
        return is_blackjack(self.cards)

    @property
    def is_busted(self) -> bool:
        return is_busted(self.cards)

    @property
    def num_cards(self) -> int:
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.value})"
        if self.is_soft:
            value_str = f"(soft {self.value})"
        if self.is_blackjack:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, value={self.value})"
