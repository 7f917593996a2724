"""Market simulation and player actions.

The engine (``runner.GameEngine``) and live session (``scheduler.GameSession``)
are imported from their modules directly: they depend on the graph package,
which itself builds on the pure functions exported here.
"""

from .config import GameConfig
from .market import calculate_price, crash_probability, should_crash
from .offers import generate_offer
from .news import generate_news

__all__ = [
    "GameConfig",
    "calculate_price",
    "crash_probability",
    "should_crash",
    "generate_offer",
    "generate_news"
]
