"""Stand-alone counting drill."""

from random import Random

from cardplay.cards import Card
from cardplay.counting.hilo import Clock, CountTracker, GuessResult
from cardplay.shoe import Shoe


class CountingDrill:
    """
    Deal cards one at a time from a private shoe and grade the user's count.

    The drill never reshuffles on its own: once the shoe is exhausted
    ``next_card()`` returns None until ``reset()``.
    """

    def __init__(
        self,
        num_decks: int = 6,
        rng: Random | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._rng = rng or Random()
        self.shoe = Shoe(num_decks=num_decks, rng=self._rng)
        self.tracker = CountTracker(total_decks=num_decks, clock=clock)
        self.tracker.attach(self.shoe)

    def next_card(self) -> Card | None:
        """Deal and count the next card, or None when the shoe is empty."""
        if self.shoe.remaining_cards == 0:
            return None
        return self.shoe.deal_card()

    def record_guess(self, guess: int) -> GuessResult:
        return self.tracker.record_guess(guess)

    def reset(self) -> None:
        """Start over with a freshly shuffled shoe and a zero count."""
        self.shoe.initialize()
        self.tracker.reset()

    @property
    def is_active(self) -> bool:
        """True once the first card has been dealt."""
        return self.tracker.cards_dealt > 0
