"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from tulip_trader.models import Role


class CreateGameRequest(BaseModel):
    """Start a new game (role selection)."""

    role: Role = Field(
        description="Which side of the tulip trade to play"
    )
    config: Dict[str, Any] = Field(
        default_factory=dict,
        description="Overrides of GameConfig fields, e.g. {\"seed\": 7}"
    )
    autostart: bool = Field(
        default=True,
        description="Start the day and growth timers immediately; false for manual /tick play"
    )


class RestartRequest(BaseModel):
    """Restart a game, optionally switching role."""

    role: Optional[Role] = None


class PlotRequest(BaseModel):
    """Body of plant / harvest."""

    plot_id: int = Field(ge=0)


class OfferRequest(BaseModel):
    """Body of accept_offer / reject_offer."""

    offer_id: str = Field(min_length=1)


class PriceRequest(BaseModel):
    """Body of set_bid / set_ask. Values below 1 are clamped to 1."""

    price: int


class DeltaRequest(BaseModel):
    """Body of adjust_bid / adjust_ask (the ±1 / ±5 stepper)."""

    delta: int


class EmptyRequest(BaseModel):
    """Actions without arguments."""


class SubmitResultRequest(BaseModel):
    """Put a finished game on the leaderboard."""

    player_name: str = Field(min_length=1, max_length=100)


class ActionResponse(BaseModel):
    """Outcome of a player action."""

    ok: bool
    error: Optional[Literal["insufficient_funds", "insufficient_stock", "invalid_state"]] = None
    message: str
    state: Dict[str, Any]


class OfferView(BaseModel):
    id: str
    type: Literal["farmer", "client"]
    quantity: int = Field(gt=0)
    price: int = Field(ge=0)
    name: str


class GameSnapshot(BaseModel):
    """Read-only game state for rendering."""

    game_id: str
    role: Role
    coins: int = Field(ge=0)
    day: int = Field(ge=1)
    stock: int = Field(ge=0)
    current_price: int = Field(ge=0)
    price_change: int
    price_history: List[int]
    hype: int = Field(ge=0, le=100)
    reputation: Optional[int] = Field(default=None, ge=0, le=100)
    bid_price: int = Field(ge=1)
    ask_price: int = Field(ge=1)
    spread: Optional[int] = None
    margin: Optional[float] = None
    offers: List[OfferView]
    plots: List[Dict[str, Any]]
    news: str
    news_log: List[Dict[str, Any]]
    is_flash_sale_active: bool
    stock_protected: bool
    game_over: bool
    is_win: bool
    end_reason: Optional[str] = None
    notifications: List[Dict[str, str]]


# Body schema per action name
ACTION_SCHEMAS = {
    "plant": PlotRequest,
    "harvest": PlotRequest,
    "accept_offer": OfferRequest,
    "reject_offer": OfferRequest,
    "hold_stock": EmptyRequest,
    "flash_sale": EmptyRequest,
    "sell_all": EmptyRequest,
    "set_bid": PriceRequest,
    "set_ask": PriceRequest,
    "adjust_bid": DeltaRequest,
    "adjust_ask": DeltaRequest,
}
