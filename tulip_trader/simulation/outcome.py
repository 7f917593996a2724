"""Win / loss resolution."""

from typing import Dict, Any
from tulip_trader.models import GameState
from tulip_trader.simulation.config import GameConfig


def survived(state: GameState, config: GameConfig) -> bool:
    """Whether the player survives a crash with the current books."""
    if state["role"] == "merchant":
        return state["coins"] >= 0 and state["reputation"] >= config.survival_reputation
    return state["coins"] >= 0


def resolve_crash(state: GameState, config: GameConfig, reason: str) -> Dict[str, Any]:
    """
    End the game because the market collapsed.

    Returns an empty update when the game is already over, so the outcome
    is frozen by whichever event ended it first.
    """
    if state["game_over"]:
        return {}
    return {
        "game_over": True,
        "is_win": survived(state, config),
        "end_reason": reason
    }


def check_wealth_win(state: GameState, config: GameConfig) -> Dict[str, Any]:
    """End the game as a win once the player is rich enough before the crash."""
    if (not state["game_over"]
            and state["coins"] >= config.winning_coins
            and state["day"] < config.crash_day):
        return {
            "game_over": True,
            "is_win": True,
            "end_reason": "wealth"
        }
    return {}
