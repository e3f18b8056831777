import pytest

from brain import ModelWeights
from config import ConfigurationError, SimulationConfig


def test_defaults_are_consistent():
    config = SimulationConfig()
    assert config.spawn_half_size == 1.5
    assert config.shape == (8, 8, 4)
    assert ModelWeights.expected_counts(config.shape) == (64, 8, 32, 4)


@pytest.mark.parametrize("changes", [
    dict(input_count=9),
    dict(output_count=5),
    dict(selection="roulette"),
    dict(hidden_activation="relu"),
    dict(max_food=-1),
    dict(evolution_time=0.0),
    dict(crossover_blend_range=(0.8, 0.5)),
    dict(spawn_margin=3.0),
])
def test_inconsistent_settings_are_rejected(changes):
    with pytest.raises(ConfigurationError):
        SimulationConfig(**changes)


def test_replace_validates_and_rejects_unknown_fields():
    config = SimulationConfig(seed=1)
    assert config.replace(max_bots=0).max_bots == 0
    with pytest.raises(ConfigurationError):
        config.replace(bots=0)
    with pytest.raises(ConfigurationError):
        config.replace(output_count=2)


def test_configuration_errors_are_value_errors():
    assert issubclass(ConfigurationError, ValueError)
