import numpy as np
import pytest

from config import SimulationConfig


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def quiet_config():
    """No bots, no drains, small populations: energy only changes through eating."""
    return SimulationConfig(max_organisms=4, max_bots=0, max_food=3, seed=7)
