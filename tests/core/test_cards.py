"""Tests for Card, Rank and Suit."""

import pytest

from cardplay.cards import Card, Rank, Suit, full_deck, upcard_label, upcard_value


class TestCard:
    """Tests for the Card class."""

    def test_card_creation(self):
        """Test creating a card."""
        card = Card(Rank.ACE, Suit.SPADES)
        assert card.rank == Rank.ACE
        assert card.suit == Suit.SPADES

    def test_card_immutability(self):
        """Test that cards are immutable."""
        card = Card(Rank.ACE, Suit.SPADES)
        with pytest.raises(AttributeError):
            card.rank = Rank.KING

    def test_card_value(self):
        """Aces count 11 and face cards 10 before any adjustment."""
        assert Card(Rank.TWO, Suit.HEARTS).value == 2
        assert Card(Rank.TEN, Suit.HEARTS).value == 10
        assert Card(Rank.JACK, Suit.HEARTS).value == 10
        assert Card(Rank.QUEEN, Suit.HEARTS).value == 10
        assert Card(Rank.KING, Suit.HEARTS).value == 10
        assert Card(Rank.ACE, Suit.HEARTS).value == 11

    def test_card_label(self):
        """Labels are the printed ranks."""
        assert Card(Rank.TEN, Suit.CLUBS).label == "10"
        assert Card(Rank.QUEEN, Suit.CLUBS).label == "Q"
        assert Card(Rank.ACE, Suit.CLUBS).label == "A"

    def test_card_is_ten_value(self):
        """Test ten-value detection."""
        for rank in (Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING):
            assert Card(rank, Suit.SPADES).is_ten_value
        assert not Card(Rank.NINE, Suit.SPADES).is_ten_value
        assert not Card(Rank.ACE, Suit.SPADES).is_ten_value

    def test_card_from_string(self):
        """Test creating cards from strings."""
        assert Card.from_string("AS") == Card(Rank.ACE, Suit.SPADES)
        assert Card.from_string("10h") == Card(Rank.TEN, Suit.HEARTS)
        assert Card.from_string("Td") == Card(Rank.TEN, Suit.DIAMONDS)
        assert Card.from_string("K♣") == Card(Rank.KING, Suit.CLUBS)

    @pytest.mark.parametrize("text", ["", "A", "1S", "AX", "11H"])
    def test_card_from_invalid_string(self, text):
        """Malformed strings are rejected."""
        with pytest.raises(ValueError):
            Card.from_string(text)

    def test_card_str(self):
        assert str(Card(Rank.ACE, Suit.SPADES)) == "A♠"
        assert str(Card(Rank.TEN, Suit.HEARTS)) == "10♥"


class TestUpcard:
    """Dealer up-card helpers."""

    def test_upcard_value(self):
        assert upcard_value(Card(Rank.ACE, Suit.SPADES)) == 11
        assert upcard_value(Card(Rank.KING, Suit.SPADES)) == 10
        assert upcard_value(Card(Rank.FIVE, Suit.SPADES)) == 5

    def test_upcard_label_collapses_ten_values(self):
        """Every ten-value card is labelled "10"."""
        for rank in (Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING):
            assert upcard_label(Card(rank, Suit.HEARTS)) == "10"
        assert upcard_label(Card(Rank.ACE, Suit.HEARTS)) == "A"
        assert upcard_label(Card(Rank.SEVEN, Suit.HEARTS)) == "7"


class TestFullDeck:
    def test_full_deck_has_52_unique_cards(self):
        deck = full_deck()
        assert len(deck) == 52
        assert len(set(deck)) == 52

    def test_full_deck_has_four_of_each_rank(self):
        deck = full_deck()
        for rank in Rank:
            assert sum(1 for c in deck if c.rank == rank) == 4
