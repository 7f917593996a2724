"""Flavour headlines that track the phase of the bubble."""

from typing import Any
from tulip_trader.simulation.config import GameConfig


PANIC_NEWS = [
    "💥 Collapse rumors are spreading!",
    "😰 Panic among investors!",
    "📉 Signs of market saturation!",
]

WARNING_NEWS = "⚠️ Analysts question price sustainability."

MANIA_NEWS = [
    "🔥 Tulipmania reaches a new peak!",
    "💰 Fortunes are being made from tulips!",
    "✨ Nobles are paying fortunes for rare bulbs!",
]

DEMAND_NEWS = "📈 Tulip demand keeps growing!"

# Days between the peak and the decline when analysts turn sceptical
WARNING_OFFSET_DAYS = 5


def generate_news(day: int, hype: int, rng: Any, config: GameConfig) -> str:
    """Return today's headline, or an empty string when nothing is newsworthy."""
    if day >= config.decline_phase_start_day:
        return rng.choice(PANIC_NEWS)
    if day >= config.growth_phase_end_day + WARNING_OFFSET_DAYS:
        return WARNING_NEWS
    if day >= config.growth_phase_end_day:
        return rng.choice(MANIA_NEWS)
    if hype > 70:
        return DEMAND_NEWS
    return ""
