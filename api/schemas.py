"""Pydantic schemas for API requests and responses."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ActionName = Literal["hit", "stand", "double", "split", "surrender"]


# Game schemas
class NewGameRequest(BaseModel):
    """Optional rule choices for a new session; omitted fields use server defaults."""

    model_config = ConfigDict(populate_by_name=True)

    decks: int | None = Field(default=None, description="Number of decks in the shoe")
    dealer_ruleset: str | None = Field(default=None, alias="dealerRuleset")
    payout_ruleset: str | None = Field(default=None, alias="payoutRuleset")
    mode: str | None = Field(default=None, description="Named game mode preset")


class BetRequest(BaseModel):
    """Request to start a round."""

    amount: int = Field(..., ge=1, description="Bet amount")


class ActionRequest(BaseModel):
    """Request for player action."""

    action: ActionName


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    rank: str
    suit: str
    value: int


class HandResponse(BaseModel):
    """Hand representation."""

    cards: list[CardResponse]
    value: int
    is_soft: bool
    is_pair: bool
    is_blackjack: bool
    is_busted: bool
    bet: int
    result: str | None = None


class RoundSummaryResponse(BaseModel):
    hands_played: int
    hands_won: int
    blackjacks: int
    coins_won: int


class GameStateResponse(BaseModel):
    """Current game state."""

    state: str
    player_hands: list[HandResponse]
    current_hand_index: int
    dealer_hand: HandResponse
    dealer_showing: CardResponse | None
    balance: int
    can_double: bool
    can_split: bool
    can_surrender: bool
    result: str | None
    last_round: RoundSummaryResponse | None
    cards_remaining: int
    rules: dict[str, int | str]


class AdviceResponse(BaseModel):
    """Recommended moves for the current hand."""

    optimal_move: str
    count_adjusted_move: str
    expected_values: dict[str, float]
    true_count: float


class CountResponse(BaseModel):
    """Hi-Lo count of the session's shoe."""

    running_count: int
    true_count: float
    decks_remaining: float
    cards_dealt: int
    advantage: float
    betting_units: float
    take_insurance: bool


# Training schemas
class CountingCardResponse(BaseModel):
    """Next card of a counting drill, or none once the drill shoe is empty."""

    card: CardResponse | None
    cards_dealt: int
    cards_remaining: int


class CountGuessRequest(BaseModel):
    value: int


class CountGuessResponse(BaseModel):
    """Graded counting drill guess."""

    guess: int
    expected: int
    correct: bool
    accuracy: float
    speed: float


class CountingDrillStatus(BaseModel):
    decks: int
    cards_dealt: int
    cards_remaining: int
    accuracy: float


class StrategyDrillResponse(BaseModel):
    """A two-card decision to answer."""

    player_cards: list[CardResponse]
    player_value: int
    is_soft: bool
    is_pair: bool
    dealer_upcard: CardResponse


class StrategyAnswerRequest(BaseModel):
    action: ActionName


class StrategyAnswerResponse(BaseModel):
    """Graded strategy drill answer."""

    correct: bool
    optimal_action: str
    expected_values: dict[str, float]
    accuracy: float
    current_streak: int
    best_streak: int


class DeviationResponse(BaseModel):
    """Count-based index play for a situation, if one applies."""

    situation: str
    true_count: float
    deviation: str | None
    threshold: float | None
    basic_action: str | None
