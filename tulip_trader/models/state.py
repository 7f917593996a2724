"""State models for the tulip market simulation."""

from typing import TypedDict, List, Dict, Optional, Annotated, Any, Literal
import operator


Role = Literal["farmer", "merchant"]
ROLES = ("farmer", "merchant")

# Rejected-action categories
INSUFFICIENT_FUNDS = "insufficient_funds"
INSUFFICIENT_STOCK = "insufficient_stock"
INVALID_STATE = "invalid_state"


class Offer(TypedDict):
    """A trade proposal shown to the merchant."""
    id: str
    type: str  # "farmer" (sells to the merchant) or "client" (buys from the merchant)
    quantity: int
    price: int  # Per tulip
    name: str


class Plot(TypedDict):
    """One slot of the farmer's field."""
    plot_id: int
    state: str  # "empty", "growing" or "ready"
    growth_progress: float  # 0-100


class NewsItem(TypedDict):
    """A headline published on a given day."""
    day: int
    headline: str


class Notification(TypedDict):
    """Toast-style message for the player."""
    level: str  # "success", "error" or "info"
    message: str


class ActionResult(TypedDict):
    """Outcome of a player action."""
    ok: bool
    error: Optional[str]  # One of the rejected-action categories, None on success
    message: str


class GameState(TypedDict):
    """The complete state of one playthrough."""

    # Immutable once the game starts
    role: Role

    # Economy
    coins: int
    day: int
    stock: int
    current_price: int
    price_history: Annotated[List[int], operator.add]  # Append-only, one entry per tick
    hype: int
    reputation: int  # Merchant only

    # Merchant pricing and offers
    bid_price: int
    ask_price: int
    offers: Annotated[List[Offer], operator.add]

    # Farmer field
    plots: List[Plot]

    # News (transient headline + append-only log)
    news: str
    news_log: Annotated[List[NewsItem], operator.add]

    # One-tick flags
    is_flash_sale_active: bool
    stock_protected: bool

    # Terminal state
    game_over: bool
    is_win: bool
    end_reason: Optional[str]  # "early_crash", "scheduled_crash" or "wealth"

    # Injected collaborators (not part of the snapshot)
    rng: Any  # random.Random compatible
    config: Any  # GameConfig (using Any to avoid circular import)


def offers_by_id(state: GameState) -> Dict[str, Offer]:
    """Index the current offers by id."""
    return {offer["id"]: offer for offer in state["offers"]}
