"""Tests for game state persistence (serialization/deserialization)."""

from random import Random

import pytest

from api.routes.game import (
    Wallet,
    _deserialize_card,
    _deserialize_game,
    _deserialize_hand,
    _serialize_card,
    _serialize_game,
    _serialize_hand,
)
from cardplay.cards import Card, Rank, Suit
from cardplay.exceptions import EmptyShoeError
from cardplay.game import GameSession, RoundState, RoundSummary, SessionConfig
from cardplay.hand import Hand
from cardplay.outcome import Result


class TestCardSerialization:
    def test_card_roundtrip(self):
        for card in (Card(Rank.ACE, Suit.SPADES), Card(Rank.TEN, Suit.DIAMONDS)):
            assert _deserialize_card(_serialize_card(card)) == card

    def test_card_format(self):
        assert _serialize_card(Card(Rank.QUEEN, Suit.HEARTS)) == {"rank": "Q", "suit": "hearts"}


class TestHandSerialization:
    def test_hand_flags_survive(self, make_cards):
        hand = Hand(
            cards=make_cards("8", "3"),
            bet=20,
            is_doubled=True,
            is_split_hand=True,
            is_complete=True,
            result=Result.PUSH,
        )
        restored = _deserialize_hand(_serialize_hand(hand))
        assert restored == hand


class TestGameSerialization:
    """A session restored mid-round plays on exactly as the original would."""

    def _mid_round_game(self, stack, make_cards) -> GameSession:
        game = GameSession(SessionConfig(decks=2, payout_ruleset="hard"), rng=Random(5))
        stack(game.shoe, make_cards("10", "9", "6", "7", "K", "2", "3"))
        game.deal_initial_cards(25)
        return game

    def test_state_roundtrip(self, stack, make_cards):
        game = self._mid_round_game(stack, make_cards)
        restored = _deserialize_game(_serialize_game(game))

        assert restored.state == RoundState.PLAYING
        assert restored.config == game.config
        assert restored.bet == 25
        assert restored.player_hands == game.player_hands
        assert restored.dealer_hand == game.dealer_hand
        assert list(restored.shoe) == list(game.shoe)
        assert restored.shoe.in_round
        assert restored.count.running_count == game.count.running_count
        assert restored.count.count_history == game.count.count_history
        assert restored.count.true_count == game.count.true_count
        assert restored.shoe.face_down == game.shoe.face_down
        assert restored.count._start_time == game.count._start_time
        assert not restored.aborted

    def test_restored_game_continues(self, stack, make_cards):
        game = self._mid_round_game(stack, make_cards)
        restored = _deserialize_game(_serialize_game(game))

        # Player 16 stands; dealer 16 draws K and busts
        assert restored.stand()
        assert restored.state == RoundState.GAME_OVER
        assert restored.result == Result.WIN
        assert restored.last_summary.coins_won == 21
        # the hole card 7 is counted on reveal, the K drawn after
        assert restored.count.running_count == game.count.running_count - 1
        assert restored.count.cards_dealt == 5

    def test_finished_round_keeps_summary(self, stack, make_cards):
        game = self._mid_round_game(stack, make_cards)
        game.surrender()
        restored = _deserialize_game(_serialize_game(game))
        assert restored.state == RoundState.GAME_OVER
        assert restored.last_summary == RoundSummary(
            hands_played=1, hands_won=0, blackjacks=0, coins_won=-12
        )
        assert restored.player_hands[0].result == Result.LOSE

    def test_aborted_round_survives(self, stack, make_cards):
        game = self._mid_round_game(stack, make_cards)
        game.shoe._cards = []
        with pytest.raises(EmptyShoeError):
            game.hit()
        restored = _deserialize_game(_serialize_game(game))
        assert restored.aborted
        assert restored.state == RoundState.GAME_OVER
        assert restored.shoe.face_down == []


class TestWallet:
    def test_settle(self):
        wallet = Wallet(balance=100)
        wallet.settle(RoundSummary(hands_played=1, hands_won=1, blackjacks=1, coins_won=15))
        wallet.settle(RoundSummary(hands_played=1, hands_won=0, blackjacks=0, coins_won=-10))
        assert wallet == Wallet(balance=105, hands_played=2, hands_won=1, blackjacks=1)
