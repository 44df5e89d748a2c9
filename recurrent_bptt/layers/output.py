# MIT License
from __future__ import annotations

from typing import Callable
import numpy as np

from ..activations.core import Activation
from .dense import DenseLayer


class OutputLayer(DenseLayer):
    """Terminal dense layer that scores its outputs against a target."""

    def __init__(
        self,
        activation: Activation,
        cost,
        init_weights: Callable[[int, int], float],
        input_count: int,
        output_count: int,
        init_biases: Callable[[int], float] = lambda _o: 0.0,
    ):
        super().__init__(output_count, input_count, init_weights, init_biases, activation)
        self.cost = cost
        self.costs = np.zeros(self.output_count)

    def compute_costs(self, expected):
        expected = np.asarray(expected, dtype=float)
        if expected.shape != (self.output_count,):
            raise ValueError(f"expected target of length {self.output_count}, got shape {expected.shape}")
        self.costs = np.asarray(self.cost.costs(self.outputs, expected), dtype=float)
        return self.costs

    def compute_output_gradients(self, expected):
        g = self.cost.gradient(self.outputs, np.asarray(expected, dtype=float))
        self.neuron_gradients = g * self.activation.derivative(self.weighted_sums)
        return self.neuron_gradients
