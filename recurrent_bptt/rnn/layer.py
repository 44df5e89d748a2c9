# MIT License
# Recurrent layer: hidden state threaded across a sequence, per-step history,
# and backpropagation through time over that history.
from __future__ import annotations

from typing import Callable, List, Sequence
import numpy as np

from ..activations.core import Activation
from ..layers.dense import DenseLayer
from .history import record_step

Array = np.ndarray


class RecurrentLayer:
    """
    Two dense sublayers read the same combined input ``[state, inputs]``:

    - ``recurrent_tree`` produces the next state (``state_size`` neurons)
    - ``output_tree`` produces the visible output (``output_count`` neurons)

    The state is reset to zeros at the start of every sequence. Histories are
    kept across sequences and overwritten per index, so reads are always bounded
    by the ``sequence_len`` handed to the current call.
    """

    def __init__(
        self,
        output_count: int,
        input_count: int,
        init_recurrent_weights: Callable[[int, int], float],
        init_recurrent_biases: Callable[[int], float],
        recurrent_activation: Activation,
        init_output_weights: Callable[[int, int], float],
        init_output_biases: Callable[[int], float],
        output_activation: Activation,
        state_size: int,
    ):
        self.output_count = int(output_count)
        self.input_count = int(input_count)
        self.state_size = int(state_size)
        combined = self.input_count + self.state_size

        self.state = np.zeros(self.state_size)
        self.recurrent_tree = DenseLayer(
            self.state_size, combined, init_recurrent_weights, init_recurrent_biases, recurrent_activation
        )
        self.output_tree = DenseLayer(
            self.output_count, combined, init_output_weights, init_output_biases, output_activation
        )
        self.combined_inputs_scratch = np.zeros(combined)

        self.sequence_inputs: List[Array] = []
        self.prev_states: List[Array] = []
        self.computed_recurrent_gradients: List[Array] = []
        self.computed_output_gradients: List[Array] = []

    # --------------------------------------------------------------------------
    # Forward
    # --------------------------------------------------------------------------
    def reset(self):
        self.state.fill(0.0)

    def forward_propagate(self, inputs, step_index: int):
        x = np.asarray(inputs, dtype=float)
        if x.shape != (self.input_count,):
            raise ValueError(f"expected {self.input_count} inputs, got shape {x.shape}")
        if step_index < 0 or step_index > len(self.prev_states):
            raise ValueError(
                f"step index {step_index} out of order; {len(self.prev_states)} steps recorded"
            )

        S = self.state_size
        self.combined_inputs_scratch[:S] = self.state
        self.combined_inputs_scratch[S:] = x

        self.output_tree.forward_propagate(self.combined_inputs_scratch)
        self.recurrent_tree.forward_propagate(self.combined_inputs_scratch)

        record_step(self.prev_states, step_index, self.state)
        record_step(self.sequence_inputs, step_index, x)

        self.state[:] = self.recurrent_tree.outputs

    def get_outputs(self) -> Array:
        """Visible output of the latest step; this is not the state."""
        return self.output_tree.outputs

    def _combined_inputs(self, step_ix: int, out: Array) -> Array:
        S = self.state_size
        if step_ix == 0:
            out[:S] = 0.0
        else:
            out[:S] = self.prev_states[step_ix]
        out[S:] = self.sequence_inputs[step_ix]
        return out

    # --------------------------------------------------------------------------
    # Backpropagation through time
    # --------------------------------------------------------------------------
    def compute_gradients(
        self,
        output_output_weights,
        output_gradient_of_output_neurons: Sequence[Array],
        sequence_len: int,
    ):
        """
        Walk the sequence backwards. At each step both sublayers take the
        downstream output layer's gradient through ``output_output_weights``;
        the recurrent neurons additionally take the next step's recurrent
        gradient through the state columns of their own weights. The last step
        has no next step, so its recurrent gradient is the output-path term alone.

        Results are stored in forward-time order.
        """
        if sequence_len < 1 or sequence_len > len(self.prev_states):
            raise ValueError(
                f"sequence_len {sequence_len} outside recorded history of {len(self.prev_states)} steps"
            )
        if len(output_gradient_of_output_neurons) < sequence_len:
            raise ValueError(
                f"got {len(output_gradient_of_output_neurons)} output gradients for {sequence_len} steps"
            )

        S = self.state_size
        self_connected_weights = self.recurrent_tree.weights[:, :S].copy()
        combined = np.empty_like(self.combined_inputs_scratch)

        output_grads: List[Array] = []
        recurrent_grads: List[Array] = []
        next_recurrent = None
        for i in range(sequence_len - 1, -1, -1):
            c = self._combined_inputs(i, combined)
            z_out = self.output_tree.weights @ c + self.output_tree.biases
            z_rec = self.recurrent_tree.weights @ c + self.recurrent_tree.biases
            downstream = output_gradient_of_output_neurons[i]

            g_out = self.output_tree.compute_gradients(
                output_output_weights, downstream, weighted_sums=z_out
            ).copy()
            g_rec = self.recurrent_tree.compute_gradients(
                output_output_weights, downstream, weighted_sums=z_rec
            ).copy()
            if next_recurrent is not None:
                g_rec += self.recurrent_tree.compute_gradients(
                    self_connected_weights, next_recurrent, weighted_sums=z_rec
                )

            output_grads.append(g_out)
            recurrent_grads.append(g_rec)
            next_recurrent = g_rec

        output_grads.reverse()
        recurrent_grads.reverse()
        self.computed_output_gradients = output_grads
        self.computed_recurrent_gradients = recurrent_grads

    def _check_gradients(self, sequence_len: int):
        if sequence_len > len(self.computed_output_gradients):
            raise ValueError(
                f"sequence_len {sequence_len} exceeds the {len(self.computed_output_gradients)} "
                "steps of the last compute_gradients call"
            )

    # --------------------------------------------------------------------------
    # Updates
    # --------------------------------------------------------------------------
    def update_weights(self, learning_rate: float, sequence_len: int):
        # weights are tied across steps, so every step adds into the same matrix
        self._check_gradients(sequence_len)
        combined = np.empty_like(self.combined_inputs_scratch)
        for step_ix in range(sequence_len):
            c = self._combined_inputs(step_ix, combined)
            self.output_tree.update_weights(c, learning_rate, self.computed_output_gradients[step_ix])
            self.recurrent_tree.update_weights(c, learning_rate, self.computed_recurrent_gradients[step_ix])

    def update_biases(self, learning_rate: float, sequence_len: int):
        """Only the output tree's biases move; recurrent biases stay where they were initialized."""
        self._check_gradients(sequence_len)
        for step_ix in range(sequence_len):
            self.output_tree.update_biases(learning_rate, self.computed_output_gradients[step_ix])

    def metrics(self):
        return {"||s||": float(np.linalg.norm(self.state))}
