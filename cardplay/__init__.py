"""Blackjack card-play engine - no presentation code."""

from cardplay.cards import Card, Rank, Suit
from cardplay.exceptions import CardPlayError, ConfigurationError, EmptyShoeError
from cardplay.hand import Hand
from cardplay.shoe import Shoe

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "CardPlayError",
    "ConfigurationError",
    "EmptyShoeError",
    "Hand",
    "Shoe",
]
