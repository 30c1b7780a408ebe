"""Game API endpoints."""

import logging
import time
from dataclasses import asdict, dataclass
from typing import Annotated, Any, Callable

from fastapi import APIRouter, Header, HTTPException

from api.schemas import (
    ActionRequest,
    AdviceResponse,
    BetRequest,
    CardResponse,
    CountResponse,
    GameStateResponse,
    HandResponse,
    NewGameRequest,
    RoundSummaryResponse,
)
from api.session import create_session, get_session_store
from cardplay.cards import Card, Rank, Suit
from cardplay.counting.hilo import betting_units, count_advantage, should_take_insurance
from cardplay.exceptions import ConfigurationError, EmptyShoeError
from cardplay.game import GameSession, RoundState, RoundSummary, SessionConfig
from cardplay.hand import Hand
from cardplay.outcome import Result
from cardplay.strategy import get_all_action_evs
from config import config

logger = logging.getLogger(__name__)

router = APIRouter()

# In-memory caches (backed by session store)
_games: dict[str, GameSession] = {}
_wallets: dict[str, "Wallet"] = {}

# Session data keys
SESSION_KEY_GAME = "game"
SESSION_KEY_WALLET = "wallet"
SESSION_KEY_CREATED_AT = "created_at"
SESSION_KEY_LAST_ACTIVITY = "last_activity"


@dataclass
class Wallet:
    """Coins and lifetime stats for one session, settled from round summaries."""

    balance: int
    hands_played: int = 0
    hands_won: int = 0
    blackjacks: int = 0

    def settle(self, summary: RoundSummary) -> None:
        self.balance += summary.coins_won
        self.hands_played += summary.hands_played
        self.hands_won += summary.hands_won
        self.blackjacks += summary.blackjacks


def _serialize_card(card: Card) -> dict[str, str]:
    return {"rank": card.rank.value, "suit": card.suit.value}


def _deserialize_card(data: dict[str, str]) -> Card:
    return Card(Rank(data["rank"]), Suit(data["suit"]))


def _serialize_hand(hand: Hand) -> dict[str, Any]:
    return {
        "cards": [_serialize_card(c) for c in hand.cards],
        "bet": hand.bet,
        "is_doubled": hand.is_doubled,
        "is_split_hand": hand.is_split_hand,
        "is_surrendered": hand.is_surrendered,
        "is_complete": hand.is_complete,
        "result": hand.result.value if hand.result else None,
    }


def _deserialize_hand(data: dict[str, Any]) -> Hand:
    return Hand(
        cards=[_deserialize_card(c) for c in data["cards"]],
        bet=data["bet"],
        is_doubled=data["is_doubled"],
        is_split_hand=data["is_split_hand"],
        is_surrendered=data["is_surrendered"],
        is_complete=data["is_complete"],
        result=Result(data["result"]) if data["result"] else None,
    )


def _serialize_game(game: GameSession) -> dict[str, Any]:
    """Serialize a session for the session store."""
    return {
        "state": game.state.value,
        "config": game.config.to_dict(),
        "bet": game.bet,
        "current_hand_index": game.current_hand_index,
        "player_hands": [_serialize_hand(h) for h in game.player_hands],
        "dealer_hand": _serialize_hand(game.dealer_hand),
        "last_summary": game.last_summary.to_dict() if game.last_summary else None,
        "aborted": game.aborted,
        "shoe": {
            "cards": [_serialize_card(c) for c in game.shoe._cards],
            "in_round": game.shoe.in_round,
            "reshuffle_pending": game.shoe.reshuffle_pending,
            "face_down": [_serialize_card(c) for c in game.shoe.face_down],
        },
        "count": {
            "running_count": game.count.running_count,
            "cards_dealt": game.count.cards_dealt,
            "history": game.count.count_history,
            "start_time": game.count._start_time,
        },
    }


def _deserialize_game(data: dict[str, Any]) -> GameSession:
    """Restore a session from session data."""
    game = GameSession(config=SessionConfig.from_mapping(data["config"]))

    game._machine_state = data["state"]
    game.bet = data["bet"]
    game.current_hand_index = data["current_hand_index"]
    game.player_hands = [_deserialize_hand(h) for h in data["player_hands"]]
    game.dealer_hand = _deserialize_hand(data["dealer_hand"])
    if data["last_summary"]:
        game.last_summary = RoundSummary(**data["last_summary"])
    game.aborted = data["aborted"]

    shoe = data["shoe"]
    game.shoe._cards = [_deserialize_card(c) for c in shoe["cards"]]
    game.shoe._in_round = shoe["in_round"]
    game.shoe._reshuffle_pending = shoe["reshuffle_pending"]
    game.shoe._face_down = [_deserialize_card(c) for c in shoe["face_down"]]

    count = data["count"]
    game.count._running_count = count["running_count"]
    game.count._cards_dealt = count["cards_dealt"]
    game.count._count_history = list(count["history"])
    game.count._start_time = count["start_time"]

    return game


def _register(session_id: str, game: GameSession, wallet: Wallet) -> None:
    game.on_round_complete(wallet.settle)
    _games[session_id] = game
    _wallets[session_id] = wallet


async def _save_game(session_id: str) -> None:
    """Save game and wallet to the session store."""
    store = await get_session_store()
    session_data = await store.get(session_id) or {}
    session_data[SESSION_KEY_GAME] = _serialize_game(_games[session_id])
    session_data[SESSION_KEY_WALLET] = asdict(_wallets[session_id])
    session_data[SESSION_KEY_LAST_ACTIVITY] = int(time.time())
    session_data.setdefault(SESSION_KEY_CREATED_AT, int(time.time()))
    await store.set(session_id, session_data)


async def _get_game(session_id: str) -> tuple[GameSession, Wallet]:
    """Get the session's game, loading it from the store or starting a default one."""
    if session_id in _games:
        return _games[session_id], _wallets[session_id]

    store = await get_session_store()
    session_data = await store.get(session_id)
    if session_data and SESSION_KEY_GAME in session_data:
        game = _deserialize_game(session_data[SESSION_KEY_GAME])
        wallet = Wallet(**session_data[SESSION_KEY_WALLET])
    else:
        game = GameSession(config=config.game.session_config())
        wallet = Wallet(balance=config.game.starting_balance)

    _register(session_id, game, wallet)
    if not session_data:
        await _save_game(session_id)
    return game, wallet


async def _run(session_id: str, game: GameSession, action: Callable[[], bool]) -> bool:
    """Run an engine action; a shoe exhausted mid-round resets the session."""
    try:
        return action()
    except EmptyShoeError as exc:
        logger.error("Session %s: %s; round aborted", session_id, exc)
        game.reset_game()
        await _save_game(session_id)
        raise HTTPException(status_code=409, detail=f"Round aborted: {exc}") from exc


def _card_to_response(card: Card) -> CardResponse:
    return CardResponse(rank=card.label, suit=card.suit.value, value=card.value)


def _hand_to_response(hand: Hand, hide_hole_card: bool = False) -> HandResponse:
    if hide_hole_card:
        hand = Hand(cards=hand.cards[:1], bet=hand.bet)
    return HandResponse(
        cards=[_card_to_response(c) for c in hand.cards],
        value=hand.value,
        is_soft=hand.is_soft,
        is_pair=hand.is_pair,
        is_blackjack=hand.is_blackjack,
        is_busted=hand.is_busted,
        bet=hand.bet,
        result=hand.result.value if hand.result else None,
    )


def _available(game: GameSession, wallet: Wallet) -> int:
    """Coins not already staked on the current round."""
    return wallet.balance - game.bet


def _game_state_response(game: GameSession, wallet: Wallet) -> GameStateResponse:
    available = _available(game, wallet)
    upcard = game.dealer_upcard
    return GameStateResponse(
        state=game.state.value,
        player_hands=[_hand_to_response(h) for h in game.player_hands],
        current_hand_index=game.current_hand_index,
        dealer_hand=_hand_to_response(
            game.dealer_hand,
            hide_hole_card=game.state == RoundState.PLAYING,
        ),
        dealer_showing=_card_to_response(upcard) if upcard else None,
        balance=wallet.balance,
        can_double=game.can_double(available),
        can_split=game.can_split(available),
        can_surrender=game.can_surrender(),
        result=game.result.value if game.result else None,
        last_round=(
            RoundSummaryResponse(**game.last_summary.to_dict()) if game.last_summary else None
        ),
        cards_remaining=game.shoe.remaining_cards,
        rules=game.config.to_dict(),
    )


@router.post("/new")
async def new_game(
    request: NewGameRequest | None = None,
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> dict[str, str]:
    """Create a new game session with the requested rules."""
    request = request or NewGameRequest()
    try:
        if request.mode is not None:
            session_config = SessionConfig.for_mode(
                request.mode,
                decks=config.game.decks if request.decks is None else request.decks,
                dealer_ruleset=request.dealer_ruleset,
                payout_ruleset=request.payout_ruleset,
            )
        else:
            session_config = config.game.session_config(
                decks=request.decks,
                dealer_ruleset=request.dealer_ruleset,
                payout_ruleset=request.payout_ruleset,
            )
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    if session_id is None:
        session_id = await create_session()

    _register(
        session_id,
        GameSession(config=session_config),
        Wallet(balance=config.game.starting_balance),
    )
    await _save_game(session_id)
    logger.info("New game %s with %s", session_id, session_config.to_dict())

    return {"session_id": session_id}


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Get current game state."""
    game, wallet = await _get_game(session_id)
    return _game_state_response(game, wallet)


@router.post("/bet")
async def place_bet(
    request: BetRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Place a bet and deal the opening cards."""
    game, wallet = await _get_game(session_id)

    if game.state == RoundState.GAME_OVER:
        game.reset_game()
    if request.amount > wallet.balance:
        raise HTTPException(status_code=400, detail="Insufficient balance")

    if not await _run(session_id, game, lambda: game.deal_initial_cards(request.amount)):
        raise HTTPException(status_code=400, detail="Cannot bet now")

    await _save_game(session_id)
    return _game_state_response(game, wallet)


@router.post("/action")
async def player_action(
    request: ActionRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Execute a player action."""
    game, wallet = await _get_game(session_id)
    available = _available(game, wallet)

    if request.action == "double" and not game.can_double(available):
        raise HTTPException(status_code=400, detail="Cannot double now")
    if request.action == "split" and not game.can_split(available):
        raise HTTPException(status_code=400, detail="Cannot split now")

    actions = {
        "hit": game.hit,
        "stand": game.stand,
        "double": game.double,
        "split": game.split,
        "surrender": game.surrender,
    }

    if not await _run(session_id, game, actions[request.action]):
        raise HTTPException(status_code=400, detail=f"Cannot {request.action} now")

    await _save_game(session_id)
    return _game_state_response(game, wallet)


@router.post("/reset")
async def reset_game(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Abandon the current round and return to betting."""
    game, wallet = await _get_game(session_id)
    game.reset_game()
    await _save_game(session_id)
    return _game_state_response(game, wallet)


@router.get("/advice")
async def get_advice(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> AdviceResponse:
    """Recommended move for the current hand, with and without the count."""
    game, wallet = await _get_game(session_id)
    available = _available(game, wallet)

    situation = game.current_situation(available)
    if situation is None:
        raise HTTPException(status_code=400, detail="No decision to advise on")

    return AdviceResponse(
        optimal_move=game.get_optimal_move(available).value,
        count_adjusted_move=game.get_count_adjusted_move(available).value,
        expected_values={
            action.value: ev for action, ev in get_all_action_evs(situation).items()
        },
        true_count=game.count.true_count,
    )


@router.get("/count")
async def get_count(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> CountResponse:
    """Hi-Lo count of the session's shoe."""
    game, _ = await _get_game(session_id)
    true_count = game.count.true_count
    return CountResponse(
        running_count=game.count.running_count,
        true_count=true_count,
        decks_remaining=game.count.decks_remaining,
        cards_dealt=game.count.cards_dealt,
        advantage=count_advantage(true_count),
        betting_units=betting_units(true_count),
        take_insurance=should_take_insurance(true_count),
    )
