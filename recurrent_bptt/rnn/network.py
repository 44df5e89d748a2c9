# MIT License
# Sequence orchestration: one recurrent layer feeding a terminal output layer.
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple
import logging
import numpy as np

from ..activations.core import Activation, IDENTITY
from ..costs.core import MEAN_SQUARED_ERROR
from ..initializers.core import constant, uniform
from ..layers.output import OutputLayer
from .history import record_step
from .layer import RecurrentLayer

Array = np.ndarray

logger = logging.getLogger(__name__)


class RecurrentNetwork:
    def __init__(self, recurrent_layer: RecurrentLayer, output_layer: OutputLayer):
        if output_layer.input_count != recurrent_layer.output_count:
            raise ValueError(
                f"output layer takes {output_layer.input_count} inputs but the recurrent layer "
                f"emits {recurrent_layer.output_count}"
            )
        self.recurrent_layer = recurrent_layer
        self.output_layer = output_layer
        self.recurrent_layer_outputs: List[Array] = []
        self.outputs: List[Array] = []

    def forward_propagate(
        self,
        sequence: Sequence,
        expected_sequence: Optional[Sequence[Optional[Sequence[float]]]] = None,
    ) -> Tuple[float, List[Array]]:
        """
        Run a whole sequence from a zero state.

        Returns ``(total_cost, output_gradients)``. Steps whose target is ``None``
        still run but contribute no cost and an all-zero gradient. Without
        targets the gradient list is empty.
        """
        if expected_sequence is not None and len(expected_sequence) < len(sequence):
            raise ValueError(
                f"{len(expected_sequence)} targets for a sequence of {len(sequence)} steps"
            )
        self.recurrent_layer.reset()

        output_gradients: List[Array] = []
        total_cost = 0.0
        for step_ix, example in enumerate(sequence):
            self.recurrent_layer.forward_propagate(example, step_ix)
            visible = self.recurrent_layer.get_outputs()
            self.output_layer.forward_propagate(visible)

            record_step(self.outputs, step_ix, self.output_layer.outputs)
            record_step(self.recurrent_layer_outputs, step_ix, visible)

            if expected_sequence is None:
                continue
            expected = expected_sequence[step_ix]
            if expected is None:
                output_gradients.append(np.zeros(self.output_layer.output_count))
                continue
            total_cost += float(np.sum(self.output_layer.compute_costs(expected)))
            output_gradients.append(self.output_layer.compute_output_gradients(expected).copy())

        return total_cost, output_gradients

    def train_one_sequence(self, sequence: Sequence, expected_sequence: Sequence, learning_rate: float) -> float:
        """
        Forward, backpropagate through time and update every weight once.

        Returns the average cost per output neuron per step measured during the
        forward pass, i.e. before this call's updates were applied.
        """
        if len(sequence) != len(expected_sequence):
            raise ValueError(
                f"sequence has {len(sequence)} steps but {len(expected_sequence)} targets were given"
            )
        if len(sequence) == 0:
            raise ValueError("cannot train on an empty sequence")
        n = len(sequence)

        total_cost, output_gradients = self.forward_propagate(sequence, expected_sequence)

        self.recurrent_layer.compute_gradients(self.output_layer.weights, output_gradients, n)

        for step_ix in range(n):
            self.output_layer.update_weights(
                self.recurrent_layer_outputs[step_ix], learning_rate, output_gradients[step_ix]
            )

        self.recurrent_layer.update_weights(learning_rate, n)
        self.recurrent_layer.update_biases(learning_rate, n)

        cost = total_cost / self.output_layer.output_count / n
        logger.debug("trained on %d steps, pre-update cost %.6g", n, cost)
        return cost

    def predict(self, sequence: Sequence) -> List[Array]:
        self.forward_propagate(sequence)
        return [o.copy() for o in self.outputs[: len(sequence)]]


def build_network(
    input_size: int,
    output_size: int,
    state_size: int,
    *,
    visible_size: Optional[int] = None,
    init_recurrent_weights=None,
    init_recurrent_biases=None,
    recurrent_activation: Activation = IDENTITY,
    init_output_weights=None,
    init_output_biases=None,
    output_activation: Activation = IDENTITY,
    init_final_weights=None,
    final_activation: Activation = IDENTITY,
    cost=MEAN_SQUARED_ERROR,
    seed: Optional[int] = None,
) -> RecurrentNetwork:
    """
    Wire a recurrent layer to an output layer.

    ``visible_size`` is the width of the recurrent layer's visible output and
    defaults to ``output_size``. Unset recurrent/output-tree weights are drawn
    from U[0, 0.1), biases start at zero and the output layer starts at all ones.
    """
    visible = output_size if visible_size is None else int(visible_size)
    rng = np.random.RandomState(seed)
    if init_recurrent_weights is None:
        init_recurrent_weights = uniform(0.0, 0.1, seed=rng.randint(2 ** 31 - 1))
    if init_output_weights is None:
        init_output_weights = uniform(0.0, 0.1, seed=rng.randint(2 ** 31 - 1))
    recurrent_layer = RecurrentLayer(
        visible,
        input_size,
        init_recurrent_weights,
        init_recurrent_biases or constant(0.0),
        recurrent_activation,
        init_output_weights,
        init_output_biases or constant(0.0),
        output_activation,
        state_size,
    )
    output_layer = OutputLayer(
        final_activation,
        cost,
        init_final_weights or constant(1.0),
        input_count=visible,
        output_count=output_size,
    )
    return RecurrentNetwork(recurrent_layer, output_layer)
