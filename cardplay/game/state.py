"""Round state enumeration."""

from enum import Enum


class RoundState(Enum):
    """
    Round state machine states.

    Flow: BETTING → PLAYING → DEALER_TURN → GAME_OVER → (reset) BETTING

    PLAYING goes straight to GAME_OVER when every player hand busted or
    surrendered, or when the round is aborted.
    """

    BETTING = "betting"
    PLAYING = "playing"
    DEALER_TURN = "dealer_turn"
    GAME_OVER = "game_over"

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()

