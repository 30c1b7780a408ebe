"""Game session, round state and events."""

from cardplay.game.config import SessionConfig
from cardplay.game.engine import GameSession
from cardplay.game.events import EventEmitter, EventType, GameEvent
from cardplay.game.state import RoundState
from cardplay.game.summary import RoundSummary

__all__ = [
    "SessionConfig",
    "GameSession",
    "EventEmitter",
    "EventType",
    "GameEvent",
    "RoundState",
    "RoundSummary",
]
