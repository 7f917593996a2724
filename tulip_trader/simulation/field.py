"""The farmer's tulip field."""

from typing import List
from tulip_trader.models import Plot
from tulip_trader.simulation.config import GameConfig


EMPTY = "empty"
GROWING = "growing"
READY = "ready"


def create_plots(config: GameConfig) -> List[Plot]:
    """Create an empty field."""
    return [
        {"plot_id": i, "state": EMPTY, "growth_progress": 0.0}
        for i in range(config.plot_count)
    ]


def grow_plots(plots: List[Plot], config: GameConfig) -> List[Plot]:
    """
    Advance every growing plot by one growth tick.

    A plot becomes ready once its progress reaches 100%. Empty and ready
    plots are returned unchanged.
    """
    new_plots = []
    for plot in plots:
        if plot["state"] == GROWING:
            progress = plot["growth_progress"] + config.growth_step
            if progress >= 100:
                plot = {**plot, "state": READY, "growth_progress": 100.0}
            else:
                plot = {**plot, "growth_progress": progress}
        new_plots.append(plot)
    return new_plots
