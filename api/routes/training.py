"""Training drill API endpoints."""

import logging
from random import Random
from typing import Annotated

from fastapi import APIRouter, Header, HTTPException, Query

from api.schemas import (
    CardResponse,
    CountGuessRequest,
    CountGuessResponse,
    CountingCardResponse,
    CountingDrillStatus,
    DeviationResponse,
    StrategyAnswerRequest,
    StrategyAnswerResponse,
    StrategyDrillResponse,
)
from cardplay.cards import Card, upcard_label
from cardplay.counting import CountingDrill
from cardplay.hand import calculate_total, is_pair, is_soft
from cardplay.shoe import Shoe
from cardplay.strategy import (
    Action,
    DecisionTracker,
    Situation,
    get_all_action_evs,
    get_optimal_action,
)
from cardplay.strategy.deviations import DeviationKey, find_index_play
from config import config

logger = logging.getLogger(__name__)

router = APIRouter()

# Per-session drill state
_counting_drills: dict[str, CountingDrill] = {}
_strategy_hands: dict[str, tuple[list[Card], Card]] = {}
_decision_trackers: dict[str, DecisionTracker] = {}


def _card_to_response(card: Card) -> CardResponse:
    return CardResponse(rank=card.label, suit=card.suit.value, value=card.value)


def _get_counting_drill(session_id: str) -> CountingDrill:
    drill = _counting_drills.get(session_id)
    if drill is None:
        raise HTTPException(status_code=404, detail="No counting drill for this session")
    return drill


def _drill_status(drill: CountingDrill) -> CountingDrillStatus:
    return CountingDrillStatus(
        decks=drill.shoe.num_decks,
        cards_dealt=drill.tracker.cards_dealt,
        cards_remaining=drill.shoe.remaining_cards,
        accuracy=drill.tracker.accuracy,
    )


@router.post("/counting/start")
async def start_counting_drill(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
    decks: Annotated[int, Query(ge=1, le=8)] = config.game.decks,
) -> CountingDrillStatus:
    """Start a counting drill with a freshly shuffled shoe."""
    drill = CountingDrill(num_decks=decks)
    _counting_drills[session_id] = drill
    logger.debug("Counting drill started for %s with %d decks", session_id, decks)
    return _drill_status(drill)


@router.post("/counting/next")
async def next_counting_card(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> CountingCardResponse:
    """Deal the next drill card."""
    drill = _get_counting_drill(session_id)
    card = drill.next_card()
    return CountingCardResponse(
        card=_card_to_response(card) if card else None,
        cards_dealt=drill.tracker.cards_dealt,
        cards_remaining=drill.shoe.remaining_cards,
    )


@router.post("/counting/guess")
async def guess_count(
    request: CountGuessRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> CountGuessResponse:
    """Grade the user's running count."""
    result = _get_counting_drill(session_id).record_guess(request.value)
    return CountGuessResponse(
        guess=result.guess,
        expected=result.expected,
        correct=result.correct,
        accuracy=result.accuracy,
        speed=result.speed,
    )


@router.post("/counting/reset")
async def reset_counting_drill(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> CountingDrillStatus:
    """Reshuffle the drill shoe and zero the count."""
    drill = _get_counting_drill(session_id)
    drill.reset()
    return _drill_status(drill)


@router.post("/strategy/drill")
async def strategy_drill(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> StrategyDrillResponse:
    """Deal a random two-card hand against a dealer up-card."""
    shoe = Shoe(num_decks=1, rng=Random())
    player_cards = [shoe.deal_card(), shoe.deal_card()]
    dealer_upcard = shoe.deal_card()

    _strategy_hands[session_id] = (player_cards, dealer_upcard)

    return StrategyDrillResponse(
        player_cards=[_card_to_response(c) for c in player_cards],
        player_value=calculate_total(player_cards),
        is_soft=is_soft(player_cards),
        is_pair=is_pair(player_cards),
        dealer_upcard=_card_to_response(dealer_upcard),
    )


@router.post("/strategy/answer")
async def strategy_answer(
    request: StrategyAnswerRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> StrategyAnswerResponse:
    """Grade an answer to the current strategy drill."""
    hand = _strategy_hands.pop(session_id, None)
    if hand is None:
        raise HTTPException(status_code=404, detail="No strategy drill in progress")

    player_cards, dealer_upcard = hand
    situation = Situation.from_hands(player_cards, dealer_upcard)
    optimal = get_optimal_action(situation)

    tracker = _decision_trackers.setdefault(session_id, DecisionTracker())
    correct = tracker.record_decision(Action(request.action), optimal)

    return StrategyAnswerResponse(
        correct=correct,
        optimal_action=optimal.value,
        expected_values={
            action.value: ev for action, ev in get_all_action_evs(situation).items()
        },
        accuracy=tracker.accuracy,
        current_streak=tracker.current_streak,
        best_streak=tracker.best_streak,
    )


@router.get("/deviation")
async def lookup_deviation(
    player_total: Annotated[int, Query(ge=4, le=21)],
    dealer_upcard: Annotated[str, Query(description='Up-card rank, e.g. "10", "K" or "A"')],
    true_count: float,
    pair: bool = False,
) -> DeviationResponse:
    """Look up the index play for a situation at a true count."""
    try:
        upcard = Card.from_string(f"{dealer_upcard}S")
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    key = DeviationKey(player_total, upcard_label(upcard), pair)
    play = find_index_play(*key)
    deviation = play.action if play and play.should_deviate(true_count) else None

    return DeviationResponse(
        situation=str(key),
        true_count=true_count,
        deviation=deviation.value if deviation else None,
        threshold=play.true_count_threshold if play else None,
        basic_action=play.basic_action.value if play else None,
    )
