"""Hi-Lo card counting and drill grading."""

import math
import time
from dataclasses import dataclass
from typing import Callable, Mapping

from cardplay.cards import Card, Rank
from cardplay.shoe import Shoe

Clock = Callable[[], float]

# Tag values:
#     2-6: +1 (low cards)
#     7-9: 0  (neutral)
#     10-A: -1 (high cards)
HI_LO_TAGS: Mapping[Rank, int] = {
    Rank.TWO: 1,
    Rank.THREE: 1,
    Rank.FOUR: 1,
    Rank.FIVE: 1,
    Rank.SIX: 1,
    Rank.SEVEN: 0,
    Rank.EIGHT: 0,
    Rank.NINE: 0,
    Rank.TEN: -1,
    Rank.JACK: -1,
    Rank.QUEEN: -1,
    Rank.KING: -1,
    Rank.ACE: -1,
}

MIN_DECKS_REMAINING = 0.5


def hi_lo_value(card: Card) -> int:
    """Return the Hi-Lo tag of a card."""
    return HI_LO_TAGS[card.rank]


def round_to_tenth(value: float) -> float:
    """Round to one decimal place, halves rounding up."""
    return math.floor(value * 10 + 0.5) / 10


def count_advantage(true_count: float) -> float:
    """Approximate player edge: about half a percent per point of true count."""
    return true_count * 0.005


def betting_units(true_count: float, base_unit: float = 1) -> float:
    """Bet ramp: one unit up to TC +1, then TC - 1 units, capped at 8."""
    if true_count <= 1:
        return base_unit
    return min(base_unit * (true_count - 1), base_unit * 8)


def should_take_insurance(true_count: float) -> bool:
    """Insurance is worth taking from TC +3."""
    return true_count >= 3


@dataclass(frozen=True)
class GuessResult:
    """Outcome of grading one drill guess."""

    guess: int
    expected: int
    correct: bool
    accuracy: float
    speed: float


class CountTracker:
    """
    Hi-Lo running and true count with drill grading.

    Attach it to a shoe and it counts every card the shoe shows; a face-down
    card is counted when it is revealed. The count is only cleared by
    ``reset()``; reshuffling the shoe does not touch it.
    """

    def __init__(self, total_decks: int = 6, clock: Clock | None = None) -> None:
        """
        Initialize a tracker.

        Args:
            total_decks: Number of decks in the shoe being counted
            clock: Seconds source for the drill speed metric
        """
        self._total_decks = total_decks
        self._clock = clock or time.monotonic
        self.reset()

    def reset(self) -> None:
        """Zero the count and all drill statistics."""
        self._running_count = 0
        self._cards_dealt = 0
        self._count_history: list[int] = []
        self._guesses: list[int] = []
        self._correct_guesses = 0
        self._start_time: float | None = None
        self._speed = 0.0

    def attach(self, shoe: Shoe) -> None:
        """Count every card ``shoe`` deals from now on."""
        shoe.subscribe(self.count_card)

    def detach(self, shoe: Shoe) -> None:
        shoe.unsubscribe(self.count_card)

    def count_card(self, card: Card) -> int:
        """
        Count a single card.

        Returns:
            The card's tag value
        """
        tag = hi_lo_value(card)
        if self._start_time is None:
            self._start_time = self._clock()
        self._running_count += tag
        self._cards_dealt += 1
        self._count_history.append(self._running_count)
        return tag

    @property
    def running_count(self) -> int:
        return self._running_count

    @property
    def cards_dealt(self) -> int:
        return self._cards_dealt

    @property
    def total_decks(self) -> int:
        return self._total_decks

    @property
    def decks_remaining(self) -> float:
        """Estimated decks left, never below half a deck."""
        return max(MIN_DECKS_REMAINING, self._total_decks - self._cards_dealt / 52)

    @property
    def true_count(self) -> float:
        """Running count per remaining deck, to one decimal place."""
        return round_to_tenth(self._running_count / self.decks_remaining)

    @property
    def count_history(self) -> list[int]:
        """Running count after each counted card."""
        return self._count_history.copy()

    def record_guess(self, guess: int) -> GuessResult:
        """
        Grade a drill guess.

        The n-th guess is checked against the running count right after the
        n-th counted card. Guesses made ahead of the cards are checked
        against the current count.
        """
        index = len(self._guesses)
        if index < len(self._count_history):
            expected = self._count_history[index]
        else:
            expected = self._running_count

        correct = guess == expected
        self._guesses.append(guess)
        if correct:
            self._correct_guesses += 1

        if self._start_time is None:
            elapsed = 1.0
        else:
            elapsed = self._clock() - self._start_time
        self._speed = self._cards_dealt / elapsed if elapsed > 0 else 0.0

        return GuessResult(
            guess=guess,
            expected=expected,
            correct=correct,
            accuracy=self.accuracy,
            speed=self._speed,
        )

    @property
    def guesses(self) -> int:
        return len(self._guesses)

    @property
    def accuracy(self) -> float:
        """Percentage of correct guesses (100 before any guess)."""
        if not self._guesses:
            return 100.0
        return self._correct_guesses / len(self._guesses) * 100

    @property
    def speed(self) -> float:
        """Cards per second as of the last graded guess."""
        return self._speed

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(running_count={self._running_count}, "
            f"true_count={self.true_count})"
        )
