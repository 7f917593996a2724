"""Data models for the simulation."""

from .state import (
    ROLES,
    INSUFFICIENT_FUNDS,
    INSUFFICIENT_STOCK,
    INVALID_STATE,
    Role,
    Offer,
    Plot,
    NewsItem,
    Notification,
    ActionResult,
    GameState,
    offers_by_id
)

__all__ = [
    "ROLES",
    "INSUFFICIENT_FUNDS",
    "INSUFFICIENT_STOCK",
    "INVALID_STATE",
    "Role",
    "Offer",
    "Plot",
    "NewsItem",
    "Notification",
    "ActionResult",
    "GameState",
    "offers_by_id"
]
