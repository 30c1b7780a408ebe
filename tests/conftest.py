"""Pytest fixtures for cardplay tests."""

from random import Random

import pytest

from cardplay.cards import Card, Rank, Suit
from cardplay.counting import CountTracker
from cardplay.game import GameSession, SessionConfig
from cardplay.hand import Hand
from cardplay.shoe import Shoe


class FixedRandom(Random):
    """Random whose ``random()`` always returns the same value."""

    def __init__(self, value: float, seed: int = 42) -> None:
        super().__init__(seed)
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


class FakeClock:
    """Manually advanced seconds source."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


def cards(*labels: str) -> list[Card]:
    """Build cards from rank labels; suits cycle so repeated ranks stay distinct."""
    suits = list(Suit)
    return [Card(Rank(label), suits[i % len(suits)]) for i, label in enumerate(labels)]


def stack_shoe(shoe: Shoe, top: list[Card]) -> None:
    """
    Put ``top`` on top of the shoe, dealt in list order.

    The shoe keeps its composition: each stacked card is taken out of the
    rest of the shoe first.
    """
    rest = list(shoe._cards)
    for card in top:
        rest.remove(card)
    shoe._cards = rest + list(reversed(top))


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled 6-deck shoe."""
    return Shoe(num_decks=6, rng=rng)


@pytest.fixture
def single_deck_shoe(rng):
    """A shuffled 1-deck shoe."""
    return Shoe(num_decks=1, rng=rng)


@pytest.fixture
def tracker():
    """A Hi-Lo tracker for a 6-deck shoe."""
    return CountTracker(total_decks=6, clock=FakeClock())


@pytest.fixture
def session(rng):
    """A 1-deck session with standard rules."""
    return GameSession(config=SessionConfig(decks=1), rng=rng)


@pytest.fixture
def table(rng):
    """A 6-deck session with standard rules, for stacked-shoe scenarios."""
    return GameSession(config=SessionConfig(decks=6), rng=rng)


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return Hand(cards=cards("A", "K"))


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return Hand(cards=cards("A", "6"))


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return Hand(cards=cards("10", "6"))


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return Hand(cards=cards("8", "8"))


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return Hand(cards=cards("10", "6", "K"))


@pytest.fixture
def make_cards():
    """Card builder: ``make_cards("A", "K")``."""
    return cards


@pytest.fixture
def stack():
    """Shoe stacker: ``stack(shoe, cards)`` deals ``cards`` next, in order."""
    return stack_shoe


@pytest.fixture
def clock():
    """A manually advanced clock."""
    return FakeClock()


@pytest.fixture
def fixed_random():
    """Factory for a Random whose ``random()`` is pinned: ``fixed_random(0.1)``."""
    return FixedRandom
