"""Graph nodes for the daily market tick."""

import math
import logging
from typing import Dict, Any
from functools import wraps
from tulip_trader.models import GameState
from tulip_trader.simulation.market import calculate_price, collapse_price, should_crash, crash_probability
from tulip_trader.simulation.news import generate_news
from tulip_trader.simulation.offers import generate_offer
from tulip_trader.simulation.outcome import resolve_crash, check_wealth_win as _check_wealth_win

logger = logging.getLogger("tulip_trader.graph")


def log_node_execution(func):
    """Decorator to log node execution start and completion."""
    @wraps(func)
    def wrapper(state: GameState) -> Dict[str, Any]:
        node_name = func.__name__
        day = state.get("day", "?")
        logger.debug(f"[Day {day}] Node START: {node_name}")
        try:
            result = func(state)
            logger.debug(f"[Day {day}] Node COMPLETE: {node_name}")
            return result
        except Exception as e:
            logger.error(f"[Day {day}] Node FAILED: {node_name} - {str(e)}")
            raise
    return wrapper


@log_node_execution
def advance_day(state: GameState) -> Dict[str, Any]:
    """Increment the day counter."""
    return {"day": state["day"] + 1}


@log_node_execution
def apply_merchant_costs(state: GameState) -> Dict[str, Any]:
    """
    Charge the merchant's daily running costs and let stock wilt.

    Shop rent plus storage per tulip is deducted (coins floor at 0), then
    stock decays at the normal rate, or the reduced rate if Hold Stock was
    bought the previous day. Flash sale and stock protection last one day.
    """
    if state["role"] != "merchant":
        return {}

    config = state["config"]
    stock = state["stock"]

    storage_cost = stock * config.storage_cost_per_tulip
    total_daily_cost = config.shop_cost + storage_cost
    new_coins = max(0, state["coins"] - total_daily_cost)

    decay_rate = config.protected_decay if state["stock_protected"] else config.daily_decay
    new_stock = math.floor(stock * (1 - decay_rate))

    logger.debug(f"  → Daily costs: {total_daily_cost} (shop {config.shop_cost}, storage {storage_cost}), "
                 f"stock {stock} → {new_stock} (decay {decay_rate:.0%})")

    return {
        "coins": new_coins,
        "stock": new_stock,
        "stock_protected": False,
        "is_flash_sale_active": False
    }


@log_node_execution
def update_hype(state: GameState) -> Dict[str, Any]:
    """Hype builds during the growth phase, fades slowly at the peak and drops in the decline."""
    config = state["config"]
    day = state["day"]
    hype = state["hype"]

    if day < config.growth_phase_end_day:
        new_hype = min(100, hype + config.hype_growth_step)
    elif day >= config.decline_phase_start_day:
        new_hype = max(0, hype - config.hype_decline_step)
    else:
        new_hype = max(0, hype - config.hype_drift_step)

    return {"hype": new_hype}


@log_node_execution
def publish_news(state: GameState) -> Dict[str, Any]:
    """Publish a headline if the phase of the bubble warrants one."""
    headline = generate_news(state["day"], state["hype"], state["rng"], state["config"])
    if not headline:
        return {}

    logger.debug(f"  → News: {headline}")
    return {
        "news": headline,
        "news_log": [{"day": state["day"], "headline": headline}]
    }


@log_node_execution
def generate_offers(state: GameState) -> Dict[str, Any]:
    """Occasionally bring a new farmer or client offer to the merchant."""
    if state["role"] != "merchant":
        return {}

    if state["rng"].random() >= state["config"].offer_probability:
        return {}

    offer = generate_offer(state["current_price"], state["rng"])
    logger.debug(f"  → New {offer['type']} offer from {offer['name']}: "
                 f"{offer['quantity']} @ {offer['price']}")
    return {"offers": [offer]}


@log_node_execution
def check_early_crash(state: GameState) -> Dict[str, Any]:
    """Roll for a sudden collapse; more likely later and with more hype."""
    config = state["config"]
    day = state["day"]
    hype = state["hype"]

    if not should_crash(day, hype, state["rng"], config):
        return {}

    logger.info(f"[Day {day}] Early market collapse "
                f"(p={crash_probability(day, hype, config):.3f}, hype={hype})")
    return resolve_crash(state, config, "early_crash")


@log_node_execution
def check_scheduled_crash(state: GameState) -> Dict[str, Any]:
    """The bubble always bursts on the crash day."""
    config = state["config"]
    if state["day"] < config.crash_day:
        return {}

    logger.info(f"[Day {state['day']}] Scheduled market collapse")
    return resolve_crash(state, config, "scheduled_crash")


@log_node_execution
def record_collapse(state: GameState) -> Dict[str, Any]:
    """Show the post-crash price; nothing else changes once the game is over."""
    price = collapse_price(state["config"])
    return {
        "current_price": price,
        "price_history": [price]
    }


@log_node_execution
def update_price(state: GameState) -> Dict[str, Any]:
    """Reprice the market and reset the merchant's default bid / ask around it."""
    config = state["config"]
    new_price = calculate_price(state["day"], state["hype"], config)

    return {
        "current_price": new_price,
        "price_history": [new_price],
        "bid_price": max(1, math.floor(new_price * (1 - config.bid_spread))),
        "ask_price": max(1, math.floor(new_price * (1 + config.ask_spread)))
    }


@log_node_execution
def check_wealth_win(state: GameState) -> Dict[str, Any]:
    """Winning by wealth before the crash ends the game immediately."""
    result = _check_wealth_win(state, state["config"])
    if result:
        logger.info(f"[Day {state['day']}] Wealth target reached with {state['coins']} coins")
    return result
