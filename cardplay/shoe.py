"""Multi-deck shoe that only reshuffles between rounds."""

import logging
from random import Random
from typing import Callable, Iterator

from cardplay.cards import Card, full_deck
from cardplay.exceptions import ConfigurationError, EmptyShoeError

logger = logging.getLogger(__name__)

CardListener = Callable[[Card], None]

# Cut card: once this few cards remain mid-round, schedule a reshuffle.
CUT_MIN_CARDS = 10
CUT_FRACTION = 0.25

# Round start: reshuffle right away if fewer than this remain.
ROUND_START_MIN_CARDS = 20
ROUND_START_FRACTION = 0.15


class Shoe:
    """
    A multi-deck shoe for blackjack.

    Cards are dealt from the end of the sequence. Reaching the cut threshold
    during a round only marks a reshuffle as pending; the shoe is regenerated
    at the next ``start_new_round()``, so its composition never changes while
    a hand is being played.
    """

    def __init__(self, num_decks: int = 6, rng: Random | None = None) -> None:
        """
        Initialize and shuffle a shoe.

        Args:
            num_decks: Number of 52-card decks in the shoe
            rng: Random number generator for shuffling
        """
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self._num_decks = 0
        self._in_round = False
        self._reshuffle_pending = False
        self._listeners: list[CardListener] = []
        self._face_down: list[Card] = []
        self.initialize(num_decks)

    def initialize(self, num_decks: int | None = None) -> None:
        """Rebuild the full shoe, shuffle it and clear any pending reshuffle."""
        if num_decks is not None:
            if isinstance(num_decks, bool) or not isinstance(num_decks, int) or num_decks < 1:
                raise ConfigurationError(
                    f"Shoe must have at least 1 deck, got {num_decks!r}"
                )
            self._num_decks = num_decks

        self._cards = [card for _ in range(self._num_decks) for card in full_deck()]
        self._rng.shuffle(self._cards)
        self._reshuffle_pending = False
        logger.debug("Shuffled %d-deck shoe (%d cards)", self._num_decks, len(self._cards))

    def subscribe(self, listener: CardListener) -> None:
        """Call ``listener`` with every card dealt from now on."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: CardListener) -> None:
        """Stop notifying ``listener``."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def deal_card(self, face_up: bool = True) -> Card:
        """
        Deal the next card.

        A face-down card is held back from subscribers until ``reveal()`` or
        the end of the round.

        Raises:
            EmptyShoeError: if the shoe has no cards left
        """
        if not self._cards:
            logger.error(
                "Dealt from an empty %d-deck shoe (in_round=%s)",
                self._num_decks,
                self._in_round,
            )
            raise EmptyShoeError("Cannot deal from an empty shoe")

        card = self._cards.pop()

        if self._in_round and not self._reshuffle_pending:
            if len(self._cards) <= self.cut_threshold:
                self._reshuffle_pending = True
                logger.debug(
                    "Cut card reached with %d cards left; reshuffle deferred",
                    len(self._cards),
                )

        if face_up:
            self._notify(card)
        else:
            self._face_down.append(card)

        return card

    def reveal(self, card: Card) -> None:
        """Turn a face-down card over and pass it to subscribers."""
        if card in self._face_down:
            self._face_down.remove(card)
            self._notify(card)

    def _notify(self, card: Card) -> None:
        for listener in self._listeners:
            listener(card)

    def start_new_round(self) -> bool:
        """
        Mark the start of a round, reshuffling first if needed.

        Returns:
            True if the shoe was reshuffled
        """
        reshuffled = False
        # Cards left face down by an abandoned round were never shown.
        self._face_down.clear()
        if self._reshuffle_pending or len(self._cards) < self.reshuffle_threshold:
            self.initialize()
            reshuffled = True
            logger.info("Shoe reshuffled between rounds")

        self._in_round = True
        return reshuffled

    def end_round(self) -> None:
        """Mark the end of the current round, showing any face-down cards."""
        for card in list(self._face_down):
            self.reveal(card)
        self._in_round = False

    @property
    def cut_threshold(self) -> float:
        """Remaining-card count at which a reshuffle is scheduled mid-round."""
        return max(CUT_MIN_CARDS, self.total_cards * CUT_FRACTION)

    @property
    def reshuffle_threshold(self) -> float:
        """Remaining-card count below which a new round reshuffles first."""
        return max(ROUND_START_MIN_CARDS, self.total_cards * ROUND_START_FRACTION)

    @property
    def remaining_cards(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)

    @property
    def cards_dealt(self) -> int:
        """Return the number of cards dealt since the last shuffle."""
        return self.total_cards - len(self._cards)

    @property
    def total_cards(self) -> int:
        """Return the number of cards in a full shoe."""
        return self._num_decks * 52

    @property
    def num_decks(self) -> int:
        return self._num_decks

    @property
    def in_round(self) -> bool:
        return self._in_round

    @property
    def reshuffle_pending(self) -> bool:
        return self._reshuffle_pending

    @property
    def face_down(self) -> list[Card]:
        """Dealt cards not yet shown to subscribers."""
        return self._face_down.copy()

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
