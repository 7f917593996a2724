"""Player actions.

Each handler validates the request against the current state and either
applies the change or rejects it. Rejections are part of gameplay, not
errors: they come back as an ``ActionResult`` with one of the
rejected-action categories and may cost the merchant reputation.

Handlers mutate the state in place and never raise for gameplay reasons.
"""

import math
from typing import Optional
from tulip_trader.models import (
    ActionResult,
    GameState,
    INSUFFICIENT_FUNDS,
    INSUFFICIENT_STOCK,
    INVALID_STATE,
    offers_by_id
)
from tulip_trader.simulation.field import EMPTY, GROWING, READY
from tulip_trader.simulation.outcome import check_wealth_win


def _ok(message: str) -> ActionResult:
    return {"ok": True, "error": None, "message": message}


def _rejected(error: str, message: str) -> ActionResult:
    return {"ok": False, "error": error, "message": message}


def _guard(state: GameState, role: Optional[str] = None) -> Optional[ActionResult]:
    """Reject actions after the game ended or from the wrong role."""
    if state["game_over"]:
        return _rejected(INVALID_STATE, "The game is over.")
    if role is not None and state["role"] != role:
        return _rejected(INVALID_STATE, f"Only a {role} can do that.")
    return None


def _change_reputation(state: GameState, delta: int) -> None:
    state["reputation"] = max(0, min(100, state["reputation"] + delta))


def _apply_wealth_win(state: GameState) -> None:
    state.update(check_wealth_win(state, state["config"]))


def _find_plot(state: GameState, plot_id: int):
    for plot in state["plots"]:
        if plot["plot_id"] == plot_id:
            return plot
    return None


# ============================================================================
# FARMER
# ============================================================================

def plant(state: GameState, plot_id: int) -> ActionResult:
    """Plant a bulb in an empty plot."""
    rejected = _guard(state, "farmer")
    if rejected:
        return rejected

    config = state["config"]
    plot = _find_plot(state, plot_id)
    if plot is None or plot["state"] != EMPTY:
        return _rejected(INVALID_STATE, "That plot is not empty.")

    if state["coins"] < config.plant_cost:
        return _rejected(INSUFFICIENT_FUNDS, "💸 Not enough florins!")

    state["coins"] = max(0, state["coins"] - config.plant_cost)
    plot["state"] = GROWING
    plot["growth_progress"] = 0.0
    return _ok(f"🌱 Planted a bulb in plot {plot_id}.")


def harvest(state: GameState, plot_id: int) -> ActionResult:
    """Harvest a ready plot into stock."""
    rejected = _guard(state, "farmer")
    if rejected:
        return rejected

    plot = _find_plot(state, plot_id)
    if plot is None or plot["state"] != READY:
        return _rejected(INVALID_STATE, "That plot is not ready.")

    state["stock"] += 1
    plot["state"] = EMPTY
    plot["growth_progress"] = 0.0
    return _ok("🌷 Harvested a tulip!")


# ============================================================================
# MERCHANT
# ============================================================================

def accept_offer(state: GameState, offer_id: str) -> ActionResult:
    """
    Accept a farmer or client offer.

    Buying from a farmer needs the coins, selling to a client needs the
    stock; a failed attempt costs reputation. The offer is withdrawn either
    way.
    """
    rejected = _guard(state, "merchant")
    if rejected:
        return rejected

    offer = offers_by_id(state).get(offer_id)
    if offer is None:
        return _rejected(INVALID_STATE, "That offer is no longer available.")

    config = state["config"]
    state["offers"] = [o for o in state["offers"] if o["id"] != offer_id]
    total = offer["price"] * offer["quantity"]

    if offer["type"] == "farmer":
        if state["coins"] < total:
            _change_reputation(state, -config.reputation_failure_penalty)
            return _rejected(INSUFFICIENT_FUNDS, "💸 Not enough florins!")
        state["coins"] -= total
        state["stock"] += offer["quantity"]
        _change_reputation(state, config.reputation_buy_gain)
        return _ok(f"✅ Bought {offer['quantity']} tulips from {offer['name']}!")

    if state["stock"] < offer["quantity"]:
        _change_reputation(state, -config.reputation_failure_penalty)
        return _rejected(INSUFFICIENT_STOCK, "🌷 Not enough stock!")
    state["coins"] += total
    state["stock"] -= offer["quantity"]
    _change_reputation(state, config.reputation_sell_gain)
    _apply_wealth_win(state)
    return _ok(f"✅ Sold {offer['quantity']} tulips to {offer['name']}!")


def reject_offer(state: GameState, offer_id: str) -> ActionResult:
    """Turn an offer down; a small reputation cost. Unknown ids are ignored."""
    rejected = _guard(state, "merchant")
    if rejected:
        return rejected

    if offer_id not in offers_by_id(state):
        return _rejected(INVALID_STATE, "That offer is no longer available.")

    state["offers"] = [o for o in state["offers"] if o["id"] != offer_id]
    _change_reputation(state, -state["config"].reputation_reject_penalty)
    return _ok("Offer declined.")


def hold_stock(state: GameState) -> ActionResult:
    """Pay to halve tomorrow's stock decay."""
    rejected = _guard(state, "merchant")
    if rejected:
        return rejected

    config = state["config"]
    if state["coins"] < config.hold_stock_cost:
        return _rejected(INSUFFICIENT_FUNDS, "💸 Not enough florins!")

    state["coins"] -= config.hold_stock_cost
    state["stock_protected"] = True
    return _ok("🛡️ Stock protected!")


def flash_sale(state: GameState) -> ActionResult:
    """Cut the ask price once for the rest of the day."""
    rejected = _guard(state, "merchant")
    if rejected:
        return rejected

    if state["stock"] == 0:
        return _rejected(INSUFFICIENT_STOCK, "🌷 No stock available!")
    if state["is_flash_sale_active"]:
        return _rejected(INVALID_STATE, "A flash sale is already running.")

    discount = state["config"].flash_sale_discount
    state["is_flash_sale_active"] = True
    state["ask_price"] = max(1, math.floor(state["ask_price"] * (1 - discount)))
    return _ok("⚡ Flash sale activated!")


def set_bid(state: GameState, price: int) -> ActionResult:
    """Override the buy price until the next day resets it."""
    rejected = _guard(state, "merchant")
    if rejected:
        return rejected
    state["bid_price"] = max(1, int(price))
    return _ok(f"Bid set to {state['bid_price']}.")


def set_ask(state: GameState, price: int) -> ActionResult:
    """Override the sell price until the next day resets it."""
    rejected = _guard(state, "merchant")
    if rejected:
        return rejected
    state["ask_price"] = max(1, int(price))
    return _ok(f"Ask set to {state['ask_price']}.")


def adjust_bid(state: GameState, delta: int) -> ActionResult:
    return set_bid(state, state["bid_price"] + delta)


def adjust_ask(state: GameState, delta: int) -> ActionResult:
    return set_ask(state, state["ask_price"] + delta)


# ============================================================================
# BOTH ROLES
# ============================================================================

def sell_all(state: GameState) -> ActionResult:
    """Sell the whole stock: farmers at the market price, merchants at their ask."""
    rejected = _guard(state)
    if rejected:
        return rejected

    if state["stock"] == 0:
        return _rejected(INSUFFICIENT_STOCK, "🌷 No tulips to sell!")

    sell_price = state["current_price"] if state["role"] == "farmer" else state["ask_price"]
    earnings = state["stock"] * sell_price
    state["coins"] += earnings
    state["stock"] = 0
    _apply_wealth_win(state)
    return _ok(f"💰 Sold all stock for {earnings} florins!")
