"""Price formation and crash probability."""

import math
from typing import Any
from tulip_trader.simulation.config import GameConfig


def calculate_price(day: int, hype: int, config: GameConfig) -> int:
    """
    Calculate the market price of a tulip for a given day and hype level.

    Three regimes, each scaled by ``1 + hype / 100``:
    growth (linear rise), peak (sine oscillation around five times the base)
    and decline (linear fall toward zero). From the crash day onward the price
    is fixed at a tenth of the base price regardless of hype.

    Args:
        day: Simulation day (>= 1)
        hype: Speculative sentiment in [0, 100]
        config: Game configuration

    Returns:
        Integer price, never negative
    """
    base = config.base_price

    if day >= config.crash_day:
        return math.floor(base * 0.1)

    hype_mult = 1 + hype / 100

    if day < config.growth_phase_end_day:
        price = base * (1 + day * 0.3) * hype_mult
    elif day < config.decline_phase_start_day:
        volatility = math.sin(day) * 20
        price = (base * 5 + volatility) * hype_mult
    else:
        days_towards_end = day - config.decline_phase_start_day
        price = base * 5 * (1 - days_towards_end * 0.15) * hype_mult

    return max(0, math.floor(price))


def collapse_price(config: GameConfig) -> int:
    """Price once the bubble has burst."""
    return math.floor(config.base_price * 0.1)


def hype_multiplier(hype: int, config: GameConfig) -> float:
    """Linear crash-risk multiplier: low hype ~0.8x, high hype ~1.4x."""
    span = config.hype_multiplier_max - config.hype_multiplier_min
    return config.hype_multiplier_min + (hype / 100) * span


def crash_probability(day: int, hype: int, config: GameConfig) -> float:
    """
    Probability that the market collapses early on the given day.

    Zero before ``early_crash_start_day``. Afterwards it grows linearly per
    day, jumps by a panic bonus from ``early_crash_panic_day``, is scaled by
    the hype multiplier and capped at ``early_crash_max``.
    """
    if day < config.early_crash_start_day:
        return 0.0

    days_since_start = day - config.early_crash_start_day
    p = config.early_crash_base + days_since_start * config.early_crash_per_day

    if day >= config.early_crash_panic_day:
        p += config.early_crash_panic_bonus

    p *= hype_multiplier(hype, config)

    return min(config.early_crash_max, p)


def should_crash(day: int, hype: int, rng: Any, config: GameConfig) -> bool:
    """
    Decide whether the bubble bursts today.

    Draws exactly one uniform sample once the early-crash window has opened
    and none before it.
    """
    if day < config.early_crash_start_day:
        return False
    return rng.random() < crash_probability(day, hype, config)
