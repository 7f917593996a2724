"""Database models and operations."""

from .models import Base, GameResult
from .operations import save_game_result, get_game_result, list_rankings, init_database

__all__ = [
    "Base",
    "GameResult",
    "save_game_result",
    "get_game_result",
    "list_rankings",
    "init_database"
]
