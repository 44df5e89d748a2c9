# MIT License
# Fully-connected sublayer: weighted sum + activation, with single-step
# gradient and update primitives.
from __future__ import annotations

from typing import Callable, Optional
import numpy as np

from ..activations.core import Activation

Array = np.ndarray


class DenseLayer:
    """
    One row of ``weights`` per output neuron, row length = input dimension.

    Gradients follow the engine-wide sign convention: ``neuron_gradients`` is the
    negative derivative of the cost, so every update is an addition.
    """

    def __init__(
        self,
        output_count: int,
        input_count: int,
        init_weights: Callable[[int, int], float],
        init_biases: Callable[[int], float],
        activation: Activation,
    ):
        self.output_count = int(output_count)
        self.input_count = int(input_count)
        self.weights = np.array(
            [[init_weights(o, i) for i in range(self.input_count)] for o in range(self.output_count)],
            dtype=float,
        ).reshape(self.output_count, self.input_count)
        self.biases = np.array([init_biases(o) for o in range(self.output_count)], dtype=float)
        self.activation = activation
        self.weighted_sums = np.zeros(self.output_count)
        self.outputs = np.zeros(self.output_count)
        # only valid right after compute_gradients
        self.neuron_gradients = np.zeros(self.output_count)

    def forward_propagate(self, inputs) -> Array:
        x = np.asarray(inputs, dtype=float)
        if x.shape != (self.input_count,):
            raise ValueError(f"expected {self.input_count} inputs, got shape {x.shape}")
        self.weighted_sums = self.weights @ x + self.biases
        self.outputs = np.asarray(self.activation.apply(self.weighted_sums), dtype=float)
        return self.outputs

    def compute_gradients(self, next_weights, next_gradients, weighted_sums: Optional[Array] = None) -> Array:
        """
        Project downstream gradients back onto this layer's neurons:
            g_j = f'(z_j) * sum_k W_next[k, j] * g_next[k]
        Downstream rows only reach as many of our neurons as they are long.
        ``z`` defaults to the weighted sums of the latest forward pass.
        """
        W = np.atleast_2d(np.asarray(next_weights, dtype=float))
        g = np.asarray(next_gradients, dtype=float)
        if W.shape[0] != g.shape[0]:
            raise ValueError(f"{W.shape[0]} downstream weight rows but {g.shape[0]} downstream gradients")
        z = self.weighted_sums if weighted_sums is None else weighted_sums
        width = min(W.shape[1], self.output_count)
        projected = np.zeros(self.output_count)
        projected[:width] = g @ W[:, :width]
        self.neuron_gradients = projected * self.activation.derivative(z)
        return self.neuron_gradients

    def update_weights(self, inputs, learning_rate: float, neuron_gradients: Optional[Array] = None):
        g = self.neuron_gradients if neuron_gradients is None else np.asarray(neuron_gradients, dtype=float)
        self.weights += learning_rate * np.outer(g, np.asarray(inputs, dtype=float))

    def update_biases(self, learning_rate: float, neuron_gradients: Optional[Array] = None):
        g = self.neuron_gradients if neuron_gradients is None else np.asarray(neuron_gradients, dtype=float)
        self.biases += learning_rate * g
