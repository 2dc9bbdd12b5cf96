from .card import DEFAULT_SYMBOLS, Card, CardView, build_deck
from .config import GameConfig
from .engine import GameEngine, GameEvent, GameSnapshot
from .scheduler import AsyncioScheduler, ManualClock, TimerQueue

__all__ = [
    "DEFAULT_SYMBOLS", "Card", "CardView", "build_deck",
    "GameConfig",
    "GameEngine", "GameEvent", "GameSnapshot",
    "AsyncioScheduler", "ManualClock", "TimerQueue",
]
