import math

import numpy as np
import pytest

from brain import ModelWeights, NeuralNetwork
from helpers import SHAPE, constant_weights


def test_predict_returns_output_count_values_in_range(rng):
    network = NeuralNetwork(SHAPE, rng=rng)
    for _ in range(20):
        out = network.predict(rng.uniform(-1, 1, SHAPE[0]))
        assert out.shape == (SHAPE[2],)
        assert np.all(out >= -1.0) and np.all(out <= 1.0)


def test_predict_saturates_but_stays_bounded():
    network = NeuralNetwork(SHAPE, constant_weights(1.0))
    out = network.predict(np.full(SHAPE[0], 1e6))
    assert np.all(np.abs(out) <= 1.0)


def test_predict_rejects_wrong_input_length(rng):
    network = NeuralNetwork(SHAPE, rng=rng)
    with pytest.raises(ValueError):
        network.predict(np.zeros(SHAPE[0] + 1))


def test_forward_pass_by_hand():
    weights = ModelWeights((2, 1, 1), [0.5, -0.25], [0.1], [2.0], [0.0])
    x = [1.0, 2.0]
    tanh_net = NeuralNetwork((2, 1, 1), weights)
    assert tanh_net.predict(x)[0] == pytest.approx(math.tanh(2.0 * math.tanh(0.1)))
    identity_net = NeuralNetwork((2, 1, 1), weights.copy(), hidden_activation="identity")
    assert identity_net.predict(x)[0] == pytest.approx(math.tanh(0.2))


def test_weights_are_row_major_per_hidden_neuron():
    # Only input 0 feeds hidden neuron 0; only hidden neuron 0 feeds the output.
    weights = ModelWeights((2, 2, 1), [1.0, 0.0, 0.0, 0.0], [0.0, 0.0], [1.0, 0.0], [0.0])
    network = NeuralNetwork((2, 2, 1), weights, hidden_activation="identity")
    assert network.predict([0.3, 0.7])[0] == pytest.approx(math.tanh(0.3))


def test_random_weights_respect_ranges(rng):
    weights = ModelWeights.random(SHAPE, rng, weight_range=1.0, bias_range=0.1)
    assert [a.size for a in weights.arrays()] == list(ModelWeights.expected_counts(SHAPE))
    assert np.all(np.abs(weights.input_to_hidden_weights) <= 1.0)
    assert np.all(np.abs(weights.hidden_to_output_weights) <= 1.0)
    assert np.all(np.abs(weights.input_to_hidden_bias) <= 0.1)
    assert np.all(np.abs(weights.hidden_to_output_bias) <= 0.1)


def test_weight_lengths_are_checked():
    with pytest.raises(ValueError):
        ModelWeights((2, 2, 1), [1.0, 0.0, 0.0], [0.0, 0.0], [1.0, 0.0], [0.0])


def test_network_rejects_weights_of_other_shape():
    with pytest.raises(ValueError):
        NeuralNetwork(SHAPE, ModelWeights.zeros((8, 4, 4)))


def test_copies_do_not_share_arrays():
    original = constant_weights(0.5)
    clone = original.copy()
    clone.input_to_hidden_weights[0] = -0.5
    assert original.input_to_hidden_weights[0] == 0.5

    source = np.zeros(SHAPE[0] * SHAPE[1])
    weights = ModelWeights(SHAPE, source, np.zeros(8), np.zeros(32), np.zeros(4))
    source[0] = 1.0
    assert weights.input_to_hidden_weights[0] == 0.0


def test_export_is_plain_lists(rng):
    weights = ModelWeights.random(SHAPE, rng)
    data = weights.to_dict()
    assert data["shape"] == list(SHAPE)
    assert isinstance(data["input_to_hidden_weights"], list)
    assert ModelWeights.from_dict(data) == weights
