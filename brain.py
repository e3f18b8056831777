import numpy as np

from config import HIDDEN_ACTIVATION, WEIGHT_RANGE, BIAS_RANGE

WEIGHT_ARRAY_NAMES = (
    "input_to_hidden_weights",
    "input_to_hidden_bias",
    "hidden_to_output_weights",
    "hidden_to_output_bias",
)

# =============================================================================
# CLASS: ModelWeights
# =============================================================================
class ModelWeights:
    """
    The four flat parameter arrays of a single-hidden-layer network.

    Matrices are stored row-major with one row per receiving neuron, so
    input_to_hidden_weights[h * input_count + i] connects input i to hidden h.
    """
    def __init__(self, shape, input_to_hidden_weights, input_to_hidden_bias,
                 hidden_to_output_weights, hidden_to_output_bias):
        self.shape = tuple(int(n) for n in shape)
        if len(self.shape) != 3:
            raise ValueError(f"Shape must be (input, hidden, output), got {shape}")
        self.input_to_hidden_weights = np.array(input_to_hidden_weights, dtype=float).ravel()
        self.input_to_hidden_bias = np.array(input_to_hidden_bias, dtype=float).ravel()
        self.hidden_to_output_weights = np.array(hidden_to_output_weights, dtype=float).ravel()
        self.hidden_to_output_bias = np.array(hidden_to_output_bias, dtype=float).ravel()
        for name, expected in zip(WEIGHT_ARRAY_NAMES, self.expected_counts(self.shape)):
            actual = getattr(self, name).size
            if actual != expected:
                raise ValueError(f"{name} has {actual} values, shape {self.shape} needs {expected}")

    @staticmethod
    def expected_counts(shape):
        input_count, hidden_count, output_count = shape
        return (input_count * hidden_count, hidden_count, hidden_count * output_count, output_count)

    @classmethod
    def random(cls, shape, rng, weight_range=WEIGHT_RANGE, bias_range=BIAS_RANGE):
        input_count, hidden_count, output_count = shape
        return cls(
            shape,
            rng.uniform(-weight_range, weight_range, input_count * hidden_count),
            rng.uniform(-bias_range, bias_range, hidden_count),
            rng.uniform(-weight_range, weight_range, hidden_count * output_count),
            rng.uniform(-bias_range, bias_range, output_count),
        )

    @classmethod
    def zeros(cls, shape):
        return cls(shape, *(np.zeros(n) for n in cls.expected_counts(shape)))

    def arrays(self):
        return [getattr(self, name) for name in WEIGHT_ARRAY_NAMES]

    def flat(self):
        return np.concatenate(self.arrays())

    def copy(self):
        return ModelWeights(self.shape, *(a.copy() for a in self.arrays()))

    def to_dict(self):
        data = {"shape": list(self.shape)}
        for name, values in zip(WEIGHT_ARRAY_NAMES, self.arrays()):
            data[name] = values.tolist()
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(data["shape"], *(data[name] for name in WEIGHT_ARRAY_NAMES))

    def __eq__(self, other):
        if not isinstance(other, ModelWeights):
            return NotImplemented
        return self.shape == other.shape and all(
            np.array_equal(a, b) for a, b in zip(self.arrays(), other.arrays()))

    def __repr__(self):
        return f"ModelWeights(shape={self.shape})"

# =============================================================================
# CLASS: NeuralNetwork
# =============================================================================
class NeuralNetwork:
    def __init__(self, shape, weights=None, rng=None, hidden_activation=HIDDEN_ACTIVATION):
        self.shape = tuple(shape)
        if weights is None:
            if rng is None: rng = np.random.default_rng()
            weights = ModelWeights.random(self.shape, rng)
        elif weights.shape != self.shape:
            raise ValueError(f"Weights of shape {weights.shape} do not fit a {self.shape} network")
        if hidden_activation not in ("tanh", "identity"):
            raise ValueError(f"Unknown activation {hidden_activation!r}")
        self.weights = weights
        self.hidden_activation = hidden_activation
        input_count, hidden_count, output_count = self.shape
        # Views into the flat arrays, not copies.
        self._w1 = weights.input_to_hidden_weights.reshape(hidden_count, input_count)
        self._w2 = weights.hidden_to_output_weights.reshape(output_count, hidden_count)

    @property
    def input_count(self):
        return self.shape[0]

    @property
    def output_count(self):
        return self.shape[2]

    def predict(self, inputs):
        x = np.asarray(inputs, dtype=float).ravel()
        if x.size != self.input_count:
            raise ValueError(f"Network expects {self.input_count} inputs, got {x.size}")
        hidden = self._w1 @ x + self.weights.input_to_hidden_bias
        if self.hidden_activation == "tanh": hidden = np.tanh(hidden)
        return np.tanh(self._w2 @ hidden + self.weights.hidden_to_output_bias)

    def copy(self):
        return NeuralNetwork(self.shape, self.weights.copy(), hidden_activation=self.hidden_activation)
