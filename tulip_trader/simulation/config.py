"""Game configuration parameters."""

from dataclasses import dataclass, asdict, fields
from typing import Optional


@dataclass
class GameConfig:
    """Tuning constants for a single playthrough."""

    # Economy
    initial_coins: int = 1000
    base_price: int = 20  # Opening market price, also the price-model base
    winning_coins: int = 5000
    crash_day: int = 30  # Scheduled collapse
    initial_hype: int = 50
    initial_reputation: int = 100

    # Merchant running costs
    shop_cost: int = 30
    storage_cost_per_tulip: int = 2
    daily_decay: float = 0.08
    protected_decay: float = 0.04  # Decay rate on the day after Hold Stock
    hold_stock_cost: int = 50
    survival_reputation: int = 60

    # Market phases
    growth_phase_end_day: int = 15
    decline_phase_start_day: int = 25

    # Hype drift per day (growth / decline / in between)
    hype_growth_step: int = 5
    hype_decline_step: int = 10
    hype_drift_step: int = 2

    # Early (stochastic) crash
    early_crash_start_day: int = 18
    early_crash_base: float = 0.02
    early_crash_per_day: float = 0.006
    early_crash_panic_day: int = 25
    early_crash_panic_bonus: float = 0.05
    early_crash_max: float = 0.30
    hype_multiplier_min: float = 0.8
    hype_multiplier_max: float = 1.4

    # Merchant offers and pricing
    offer_probability: float = 0.7
    flash_sale_discount: float = 0.2
    bid_spread: float = 0.1
    ask_spread: float = 0.1
    reputation_buy_gain: int = 2
    reputation_sell_gain: int = 3
    reputation_failure_penalty: int = 5
    reputation_reject_penalty: int = 1

    # Farmer field
    plot_count: int = 6
    plant_cost: int = 10
    growth_time_seconds: float = 5.0
    growth_interval_seconds: float = 0.1

    # Timers
    day_interval_seconds: float = 8.0
    news_display_seconds: float = 6.0

    # Reproducibility (None = unseeded)
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.crash_day < 2:
            raise ValueError(f"crash_day must be at least 2, got {self.crash_day}")

        if not self.growth_phase_end_day <= self.decline_phase_start_day <= self.crash_day:
            raise ValueError(
                f"Phase days must satisfy growth_phase_end_day ({self.growth_phase_end_day}) "
                f"<= decline_phase_start_day ({self.decline_phase_start_day}) "
                f"<= crash_day ({self.crash_day})"
            )

        for name in (
            "daily_decay", "protected_decay", "offer_probability",
            "flash_sale_discount", "bid_spread", "ask_spread",
            "early_crash_base", "early_crash_max",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")

        if self.hype_multiplier_min > self.hype_multiplier_max:
            raise ValueError(
                f"hype_multiplier_min ({self.hype_multiplier_min}) > "
                f"hype_multiplier_max ({self.hype_multiplier_max})"
            )

        if not 0 <= self.initial_hype <= 100:
            raise ValueError(f"initial_hype must be within [0, 100], got {self.initial_hype}")
        if not 0 <= self.initial_reputation <= 100:
            raise ValueError(
                f"initial_reputation must be within [0, 100], got {self.initial_reputation}"
            )

        if self.initial_coins < 0 or self.base_price < 1:
            raise ValueError("initial_coins must be >= 0 and base_price >= 1")

        if self.plot_count < 1:
            raise ValueError(f"plot_count must be at least 1, got {self.plot_count}")

        for name in (
            "growth_time_seconds", "growth_interval_seconds",
            "day_interval_seconds", "news_display_seconds",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

    @property
    def growth_step(self) -> float:
        """Percent of growth a plot gains per growth tick."""
        return 100 / (self.growth_time_seconds / self.growth_interval_seconds)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "GameConfig":
        """Create configuration from dictionary."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)
