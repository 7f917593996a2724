"""Shared fixtures for the test suite."""

import random
import pytest
from tulip_trader.simulation import GameConfig
from tulip_trader.simulation.runner import GameEngine


class ScriptedRandom(random.Random):
    """
    A random.Random whose ``random()`` returns queued values first.

    ``randint`` and ``choice`` keep using the seeded bit generator, so only
    the uniform draws (offer rolls, crash rolls, price factors) are scripted.
    """

    def __init__(self, values=(), seed: int = 0):
        super().__init__(seed)
        self.queue = list(values)

    def random(self):
        if self.queue:
            return self.queue.pop(0)
        return super().random()

    # Without its own getrandbits, random.Random routes randint and choice
    # through random() and they would eat the queue
    def getrandbits(self, k):
        return super().getrandbits(k)


@pytest.fixture
def config() -> GameConfig:
    return GameConfig()


@pytest.fixture
def merchant(config) -> GameEngine:
    """A fresh merchant game on day 1; queue draws on ``merchant.rng.queue``."""
    return GameEngine("merchant", config=config, rng=ScriptedRandom(seed=1))


@pytest.fixture
def farmer(config) -> GameEngine:
    return GameEngine("farmer", config=config, rng=ScriptedRandom(seed=1))
