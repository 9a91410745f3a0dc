"""Fixed-topology feed-forward network built from a flat weight vector.

Every neuron carries one weight per input plus a trailing bias weight that is
paired with a constant -1 input. Weights flatten in layer, neuron, weight
order; ``with_weights`` consumes exactly that layout.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from core.rng import RandomSource

BIAS_INPUT = -1.0


def sigmoid(x, response: float = 1.0):
    return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=np.float64) / response))


def layer_shapes(
    input_count: int, output_count: int, hidden_layer_count: int, neurons_per_hidden_layer: int
) -> List[tuple[int, int]]:
    """Return (neurons, inputs_per_neuron + 1) for each layer in order."""
    shapes = []
    fan_in = input_count
    for _ in range(hidden_layer_count):
        shapes.append((neurons_per_hidden_layer, fan_in + 1))
        fan_in = neurons_per_hidden_layer
    shapes.append((output_count, fan_in + 1))
    return shapes


def _valid_topology(
    input_count: int, output_count: int, hidden_layer_count: int, neurons_per_hidden_layer: int
) -> bool:
    if min(input_count, output_count, hidden_layer_count, neurons_per_hidden_layer) < 0:
        return False
    if hidden_layer_count > 0 and neurons_per_hidden_layer == 0:
        return False
    return True


def expected_weight_count(
    input_count: int, output_count: int, hidden_layer_count: int, neurons_per_hidden_layer: int
) -> int:
    return sum(
        rows * cols
        for rows, cols in layer_shapes(input_count, output_count, hidden_layer_count, neurons_per_hidden_layer)
    )


class NeuralNetwork:
    def __init__(
        self,
        input_count: int,
        output_count: int,
        hidden_layer_count: int,
        neurons_per_hidden_layer: int,
        layers: Sequence[np.ndarray],
    ) -> None:
        self.input_count = input_count
        self.output_count = output_count
        self.hidden_layer_count = hidden_layer_count
        # Width is meaningless without hidden layers; normalize for equality.
        self.neurons_per_hidden_layer = neurons_per_hidden_layer if hidden_layer_count else 0
        self.layers = [np.asarray(layer, dtype=np.float64) for layer in layers]

    @classmethod
    def with_weights(
        cls,
        input_count: int,
        output_count: int,
        hidden_layer_count: int,
        neurons_per_hidden_layer: int,
        weights: Sequence[float],
    ) -> Optional["NeuralNetwork"]:
        """Build a network from a flat weight vector; None if it does not fit the topology."""
        if not _valid_topology(input_count, output_count, hidden_layer_count, neurons_per_hidden_layer):
            return None
        expected = expected_weight_count(input_count, output_count, hidden_layer_count, neurons_per_hidden_layer)
        if len(weights) != expected:
            return None
        flat = np.asarray(weights, dtype=np.float64)
        layers = []
        offset = 0
        for rows, cols in layer_shapes(input_count, output_count, hidden_layer_count, neurons_per_hidden_layer):
            size = rows * cols
            layers.append(flat[offset : offset + size].reshape(rows, cols))
            offset += size
        return cls(input_count, output_count, hidden_layer_count, neurons_per_hidden_layer, layers)

    @classmethod
    def random(
        cls,
        input_count: int,
        output_count: int,
        hidden_layer_count: int,
        neurons_per_hidden_layer: int,
        stream: RandomSource,
    ) -> "NeuralNetwork":
        if not _valid_topology(input_count, output_count, hidden_layer_count, neurons_per_hidden_layer):
            raise ValueError(
                f"Invalid topology: inputs={input_count} outputs={output_count} "
                f"hidden={hidden_layer_count}x{neurons_per_hidden_layer}"
            )
        count = expected_weight_count(input_count, output_count, hidden_layer_count, neurons_per_hidden_layer)
        weights = [stream.uniform(-1.0, 1.0) for _ in range(count)]
        net = cls.with_weights(input_count, output_count, hidden_layer_count, neurons_per_hidden_layer, weights)
        if net is None:
            raise ValueError(f"Could not build a network from {count} weights")
        return net

    def update(self, inputs: Sequence[float]) -> Optional[List[float]]:
        """Propagate inputs through every layer; None if the input width is wrong."""
        if len(inputs) != self.input_count:
            return None
        activations = np.asarray(inputs, dtype=np.float64)
        for layer in self.layers:
            augmented = np.append(activations, BIAS_INPUT)
            activations = sigmoid(layer @ augmented)
        return [float(v) for v in activations]

    def get_weights(self) -> List[float]:
        return [float(w) for layer in self.layers for w in layer.ravel()]

    def weight_count(self) -> int:
        return sum(layer.size for layer in self.layers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NeuralNetwork):
            return NotImplemented
        return (
            self.input_count == other.input_count
            and self.output_count == other.output_count
            and self.hidden_layer_count == other.hidden_layer_count
            and self.neurons_per_hidden_layer == other.neurons_per_hidden_layer
            and len(self.layers) == len(other.layers)
            and all(np.array_equal(a, b) for a, b in zip(self.layers, other.layers))
        )

    def __repr__(self) -> str:
        return (
            f"NeuralNetwork(inputs={self.input_count}, outputs={self.output_count}, "
            f"hidden={self.hidden_layer_count}x{self.neurons_per_hidden_layer})"
        )


__all__ = ["NeuralNetwork", "expected_weight_count", "layer_shapes", "sigmoid"]
