"""Blackjack game session with a round state machine."""

import logging
from random import Random
from typing import Callable

from transitions import Machine

from cardplay.cards import Card, upcard_label
from cardplay.counting.hilo import Clock, CountTracker
from cardplay.dealer import play_dealer_hand
from cardplay.exceptions import EmptyShoeError
from cardplay.game import guards
from cardplay.game.config import SessionConfig
from cardplay.game.events import EventEmitter, EventType, GameEvent
from cardplay.game.state import RoundState
from cardplay.game.summary import RoundListener, RoundSummary
from cardplay.hand import Hand
from cardplay.outcome import Result, calculate_payout, determine_winner, surrender_loss
from cardplay.shoe import Shoe
from cardplay.strategy.basic import Action, Situation, get_optimal_action
from cardplay.strategy.deviations import get_deviation

logger = logging.getLogger(__name__)

UNLIMITED_BALANCE = float("inf")


class GameSession:
    """
    One player's blackjack session.

    Owns the shoe, the hands of the current round and the Hi-Lo count. All
    state lives on the instance; create one session per player.

    Actions requested in the wrong state, or for a hand that cannot take
    them, are ignored: they return False and emit INVALID_ACTION.
    """

    # State machine states
    STATES = [s.value for s in RoundState]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "start_play", "source": "betting", "dest": "playing"},
        {"trigger": "finish_player_turn", "source": "playing", "dest": "dealer_turn"},
        {"trigger": "finish_dealer_turn", "source": "dealer_turn", "dest": "game_over"},
        {"trigger": "end_round_early", "source": "playing", "dest": "game_over"},
        {
            "trigger": "abort_round",
            "source": ["betting", "playing", "dealer_turn"],
            "dest": "game_over",
        },
        {"trigger": "new_round", "source": "*", "dest": "betting"},
    ]

    def __init__(
        self,
        config: SessionConfig | None = None,
        rng: Random | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize a new session.

        Args:
            config: Deck count and rule variants (defaults if not provided)
            rng: Random number generator for shuffling and dealer draws
            clock: Seconds source for the counting drill speed metric
        """
        self.config = config or SessionConfig()
        self._rng = rng or Random()

        self.shoe = Shoe(num_decks=self.config.decks, rng=self._rng)
        self.count = CountTracker(total_decks=self.config.decks, clock=clock)
        self.count.attach(self.shoe)

        self.player_hands: list[Hand] = []
        self.current_hand_index = 0
        self.dealer_hand = Hand()
        self.bet = 0
        self.last_summary: RoundSummary | None = None
        self.aborted = False

        self.events = EventEmitter()
        self._round_listeners: list[RoundListener] = []

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial=RoundState.BETTING.value,
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> RoundState:
        """Get current round state as enum."""
        return RoundState(self._machine_state)  # type: ignore[attr-defined]

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def on_round_complete(self, listener: RoundListener) -> None:
        """Register a collaborator to receive each round's summary."""
        self._round_listeners.append(listener)

    @property
    def current_hand(self) -> Hand | None:
        """Get the hand the player is acting on."""
        if 0 <= self.current_hand_index < len(self.player_hands):
            return self.player_hands[self.current_hand_index]
        return None

    @property
    def is_split(self) -> bool:
        return len(self.player_hands) > 1

    @property
    def dealer_upcard(self) -> Card | None:
        if self.dealer_hand.cards:
            return self.dealer_hand.cards[0]
        return None

    # Actions

    def deal_initial_cards(self, bet: int) -> bool:
        """
        Start a round: take the bet and deal two cards each.

        A player natural stands automatically, so the round may already be
        over when this returns.
        """
        if self.state != RoundState.BETTING:
            return self._ignore("deal", "Cannot deal in current state")
        if bet < 0:
            return self._ignore("deal", "Bet cannot be negative")

        self.events.clear_history()
        if self.shoe.start_new_round():
            self.events.emit_new(EventType.SHOE_SHUFFLED, cards=self.shoe.remaining_cards)

        self.bet = bet
        self.aborted = False
        self.last_summary = None
        self.player_hands = [Hand(bet=bet)]
        self.current_hand_index = 0
        self.dealer_hand = Hand()

        player_hand = self.player_hands[0]
        self._deal_card_to_hand(player_hand)
        self._deal_card_to_hand(self.dealer_hand)
        self._deal_card_to_hand(player_hand)
        self._deal_card_to_hand(self.dealer_hand, face_up=False)

        self.start_play()
        self.events.emit_new(EventType.ROUND_STARTED, bet=bet)

        if player_hand.is_blackjack:
            self.events.emit_new(EventType.PLAYER_BLACKJACK)
            return self.stand()

        return True

    def hit(self) -> bool:
        """Player hits (takes another card)."""
        hand = self._active_hand("hit")
        if hand is None:
            return False

        self._deal_card_to_hand(hand)
        self.events.emit_new(EventType.PLAYER_HIT, hand_value=hand.value)

        if hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=self.current_hand_index)
            return self._finish_hand()

        return True

    def stand(self) -> bool:
        """Player stands on the current hand."""
        hand = self._active_hand("stand")
        if hand is None:
            return False

        self.events.emit_new(EventType.PLAYER_STAND, hand_value=hand.value)
        return self._finish_hand()

    def double(self) -> bool:
        """Player doubles: one more card on twice the bet, then the hand is done."""
        hand = self._active_hand("double")
        if hand is None:
            return False
        if len(hand.cards) != 2:
            return self._ignore("double", "Can only double on two cards")

        hand.bet *= 2
        hand.is_doubled = True
        self.bet = sum(h.bet for h in self.player_hands)

        self._deal_card_to_hand(hand)
        self.events.emit_new(EventType.PLAYER_DOUBLE, hand_value=hand.value, new_bet=hand.bet)

        if hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=self.current_hand_index)

        return self._finish_hand()

    def split(self) -> bool:
        """Player splits a pair into two hands, each receiving one new card."""
        hand = self._active_hand("split")
        if hand is None:
            return False
        if self.is_split or not hand.is_pair:
            return self._ignore("split", "Cannot split")

        second_card = hand.cards.pop()
        new_hand = Hand(bet=hand.bet, is_split_hand=True)
        new_hand.add_card(second_card)
        hand.is_split_hand = True
        self.player_hands.append(new_hand)
        self.bet = sum(h.bet for h in self.player_hands)

        self._deal_card_to_hand(hand)
        self._deal_card_to_hand(new_hand)

        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            hand1_value=hand.value,
            hand2_value=new_hand.value,
        )
        return True

    def surrender(self) -> bool:
        """Player gives up the hand and loses half the bet."""
        hand = self._active_hand("surrender")
        if hand is None:
            return False
        if self.is_split or not guards.can_surrender(hand.cards):
            return self._ignore("surrender", "Can only surrender on the first two cards")

        hand.is_surrendered = True
        self.events.emit_new(EventType.PLAYER_SURRENDER)
        return self._finish_hand()

    def reset_game(self) -> bool:
        """
        Abandon the round and return to betting.

        Hands and bet are discarded. The shoe, including a pending reshuffle,
        and the count are left as they are.
        """
        self.player_hands = []
        self.current_hand_index = 0
        self.dealer_hand = Hand()
        self.bet = 0
        self.new_round()
        self.events.emit_new(EventType.ROUND_RESET)
        return True

    # Advice

    def current_situation(self, balance: float | None = None) -> Situation | None:
        """Describe the current decision for the strategy advisor."""
        hand = self.current_hand
        upcard = self.dealer_upcard
        if self.state != RoundState.PLAYING or hand is None or upcard is None:
            return None
        return Situation.from_hands(
            hand.cards,
            upcard,
            can_double=self.can_double(balance),
            can_split=self.can_split(balance),
            can_surrender=self.can_surrender(),
        )

    def get_optimal_move(self, balance: float | None = None) -> Action:
        """Basic strategy action for the current hand (Hit when there is nothing to advise on)."""
        situation = self.current_situation(balance)
        if situation is None:
            return Action.HIT
        return get_optimal_action(situation)

    def get_count_adjusted_move(self, balance: float | None = None) -> Action:
        """Basic strategy, overridden by a count deviation when the true count allows it."""
        situation = self.current_situation(balance)
        if situation is None:
            return Action.HIT

        basic = get_optimal_action(situation)
        deviation = get_deviation(
            situation.player_total,
            upcard_label(self.dealer_upcard),  # type: ignore[arg-type]
            self.count.true_count,
            pair=situation.is_pair,
        )
        if deviation == Action.DOUBLE and not situation.can_double:
            return basic
        if deviation == Action.SPLIT and not situation.can_split:
            return basic
        return deviation or basic

    # Guards for the active hand

    def can_double(self, balance: float | None = None) -> bool:
        hand = self.current_hand
        if self.state != RoundState.PLAYING or hand is None:
            return False
        return guards.can_double(hand.cards, hand.bet, self._balance(balance))

    def can_split(self, balance: float | None = None) -> bool:
        hand = self.current_hand
        if self.state != RoundState.PLAYING or hand is None or self.is_split:
            return False
        return guards.can_split(hand.cards, hand.bet, self._balance(balance))

    def can_surrender(self) -> bool:
        hand = self.current_hand
        if self.state != RoundState.PLAYING or hand is None or self.is_split:
            return False
        return guards.can_surrender(hand.cards)

    @property
    def result(self) -> Result | None:
        """Overall round result: more wins than losses is a win."""
        results = [h.result for h in self.player_hands if h.result is not None]
        if not results:
            return None
        wins = results.count(Result.WIN)
        losses = results.count(Result.LOSE)
        if wins > losses:
            return Result.WIN
        if losses > wins:
            return Result.LOSE
        return Result.PUSH

    # Internals

    @staticmethod
    def _balance(balance: float | None) -> float:
        return UNLIMITED_BALANCE if balance is None else balance

    def _ignore(self, action: str, message: str) -> bool:
        logger.debug("Ignored %s in state %s: %s", action, self.state.value, message)
        self.events.emit_new(
            EventType.INVALID_ACTION,
            action=action,
            message=message,
            state=self.state.value,
        )
        return False

    def _active_hand(self, action: str) -> Hand | None:
        if self.state != RoundState.PLAYING or self.current_hand is None:
            self._ignore(action, f"Cannot {action} in current state")
            return None
        return self.current_hand

    def _draw_card(self, face_up: bool = True) -> Card:
        try:
            return self.shoe.deal_card(face_up=face_up)
        except EmptyShoeError:
            self._abort()
            raise

    def _deal_card_to_hand(self, hand: Hand, face_up: bool = True) -> Card:
        card = self._draw_card(face_up)
        hand.add_card(card)
        self._card_dealt(hand, card, face_up)
        return card

    def _card_dealt(self, hand: Hand, card: Card, face_up: bool = True) -> None:
        is_dealer = hand is self.dealer_hand
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card) if face_up else "??",
            hand="dealer" if is_dealer else "player",
            hand_value=hand.value if face_up or not is_dealer else None,
        )

    def _dealer_hit(self, hand: Hand) -> None:
        self._card_dealt(hand, hand.cards[-1])
        self.events.emit_new(EventType.DEALER_HITS, hand_value=hand.value)

    def _abort(self) -> None:
        logger.error("Round aborted: shoe exhausted mid-round; reset_game() required")
        self.aborted = True
        self.shoe.end_round()
        self.abort_round()
        self.events.emit_new(EventType.ROUND_ABORTED, reason="empty_shoe")

    def _finish_hand(self) -> bool:
        """Close the current hand and move on to the next hand or the dealer."""
        hand = self.current_hand
        if hand is not None:
            hand.is_complete = True
        self.current_hand_index += 1

        if self.current_hand_index < len(self.player_hands):
            return True

        if all(h.is_busted or h.is_surrendered for h in self.player_hands):
            self.end_round_early()
            return self._resolve_round()

        self.finish_player_turn()
        return self._play_dealer()

    def _play_dealer(self) -> bool:
        """Reveal the hole card and draw until the dealer policy stands."""
        self.shoe.reveal(self.dealer_hand.cards[1])
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            card=str(self.dealer_hand.cards[1]),
            hand_value=self.dealer_hand.value,
        )

        play_dealer_hand(
            self.dealer_hand,
            self.config.dealer_ruleset,
            self._draw_card,
            self._rng,
            on_hit=self._dealer_hit,
        )

        if self.dealer_hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=self.dealer_hand.value)

        self.finish_dealer_turn()
        return self._resolve_round()

    def _resolve_round(self) -> bool:
        """Settle every hand, close the round and hand the summary to collaborators."""
        dealer = self.dealer_hand
        coins_won = 0

        for i, hand in enumerate(self.player_hands):
            if hand.is_surrendered:
                hand.result = Result.LOSE
                amount = surrender_loss(hand.bet)
            else:
                hand.result = determine_winner(
                    hand.value,
                    dealer.value,
                    hand.is_blackjack,
                    dealer.is_blackjack,
                    hand.is_busted,
                    dealer.is_busted,
                )
                amount = calculate_payout(
                    hand.bet,
                    hand.result,
                    hand.is_blackjack,
                    self.config.payout_ruleset,
                )

            if hand.result == Result.WIN:
                self.events.emit_new(EventType.PLAYER_WINS, hand_index=i, amount=amount)
            elif hand.result == Result.LOSE:
                self.events.emit_new(EventType.PLAYER_LOSES, hand_index=i, amount=-amount)
            else:
                self.events.emit_new(EventType.PUSH, hand_index=i)

            coins_won += amount

        self.shoe.end_round()

        summary = RoundSummary(
            hands_played=1,
            hands_won=1 if any(h.result == Result.WIN for h in self.player_hands) else 0,
            blackjacks=sum(1 for h in self.player_hands if h.is_blackjack),
            coins_won=coins_won,
        )
        self.last_summary = summary
        self.events.emit_new(EventType.ROUND_ENDED, result=str(self.result), **summary.to_dict())
        logger.info(
            "Round over: %s, coins %+d (%d hand(s))",
            self.result,
            coins_won,
            len(self.player_hands),
        )

        self._notify_round_listeners(summary)
        return True

    def _notify_round_listeners(self, summary: RoundSummary) -> None:
        for listener in self._round_listeners:
            try:
                listener(summary)
            except Exception:
                logger.exception("Round summary listener %r failed", listener)
