"""Round result summary handed to economy and stats collaborators."""

from dataclasses import asdict, dataclass
from typing import Callable


@dataclass(frozen=True)
class RoundSummary:
    """What a finished round contributes to the player's statistics."""

    hands_played: int
    hands_won: int
    blackjacks: int
    coins_won: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


RoundListener = Callable[[RoundSummary], None]
