import numpy as np
import pytest

from recurrent_bptt.activations.core import IDENTITY, TANH
from recurrent_bptt.initializers.core import constant, scaled_normal
from recurrent_bptt.rnn.layer import RecurrentLayer


def _layer(input_count=2, output_count=1, state_size=3, act=TANH, seed=0):
    return RecurrentLayer(
        output_count,
        input_count,
        scaled_normal(0.4, seed=seed),
        scaled_normal(0.1, seed=seed + 1),
        act,
        scaled_normal(0.4, seed=seed + 2),
        constant(0.0),
        act,
        state_size,
    )


def _run(layer, seq):
    layer.reset()
    for i, x in enumerate(seq):
        layer.forward_propagate(x, i)


def test_shapes_follow_dimensions():
    layer = _layer()
    assert layer.state.shape == (3,)
    assert layer.combined_inputs_scratch.shape == (5,)
    assert layer.recurrent_tree.weights.shape == (3, 5)
    assert layer.output_tree.weights.shape == (1, 5)


def test_forward_threads_state_and_records_history():
    layer = _layer()
    rng = np.random.RandomState(3)
    seq = [rng.randn(2) for _ in range(4)]
    _run(layer, seq)

    assert len(layer.prev_states) == len(layer.sequence_inputs) == 4
    np.testing.assert_array_equal(layer.prev_states[0], np.zeros(3))
    state = np.zeros(3)
    for i, x in enumerate(seq):
        np.testing.assert_allclose(layer.prev_states[i], state)
        np.testing.assert_allclose(layer.sequence_inputs[i], x)
        c = np.concatenate([state, x])
        state = np.tanh(layer.recurrent_tree.weights @ c + layer.recurrent_tree.biases)
    np.testing.assert_allclose(layer.state, state)
    np.testing.assert_allclose(layer.combined_inputs_scratch[3:], seq[-1])


def test_visible_output_is_separate_from_state():
    layer = _layer()
    _run(layer, [np.array([0.5, -0.5])])
    c = np.concatenate([np.zeros(3), [0.5, -0.5]])
    np.testing.assert_allclose(layer.get_outputs(), np.tanh(layer.output_tree.weights @ c))
    assert layer.get_outputs().shape == (1,)


def test_history_is_overwritten_not_cleared_across_sequences():
    layer = _layer()
    rng = np.random.RandomState(5)
    long_seq = [rng.randn(2) for _ in range(5)]
    short_seq = [rng.randn(2) for _ in range(3)]
    _run(layer, long_seq)
    _run(layer, short_seq)
    assert len(layer.sequence_inputs) == 5
    for i in range(3):
        np.testing.assert_allclose(layer.sequence_inputs[i], short_seq[i])
    np.testing.assert_allclose(layer.sequence_inputs[4], long_seq[4])

    layer.compute_gradients(np.ones((1, 1)), [np.ones(1)] * 3, 3)
    assert len(layer.computed_output_gradients) == 3
    assert len(layer.computed_recurrent_gradients) == 3


def test_reset_zeroes_state_only_and_is_idempotent():
    layer = _layer()
    _run(layer, [np.ones(2), np.ones(2)])
    assert np.any(layer.state != 0.0)
    layer.reset()
    np.testing.assert_array_equal(layer.state, np.zeros(3))
    layer.reset()
    np.testing.assert_array_equal(layer.state, np.zeros(3))
    assert len(layer.prev_states) == 2


def test_out_of_order_step_index_is_rejected():
    layer = _layer()
    layer.forward_propagate(np.ones(2), 0)
    with pytest.raises(ValueError):
        layer.forward_propagate(np.ones(2), 2)
    with pytest.raises(ValueError):
        layer.forward_propagate(np.ones(3), 1)


def test_single_step_recurrent_gradient_is_output_path_only():
    layer = _layer(input_count=1, output_count=1, state_size=1)
    _run(layer, [np.array([0.7])])
    V = np.array([[1.3]])
    g_down = [np.array([0.4])]
    expected = layer.recurrent_tree.compute_gradients(V, g_down[0]).copy()
    layer.compute_gradients(V, g_down, 1)
    np.testing.assert_allclose(layer.computed_recurrent_gradients[0], expected)


def test_recurrent_gradient_adds_next_step_through_self_weights():
    layer = _layer(input_count=1, output_count=1, state_size=1, act=IDENTITY)
    _run(layer, [np.array([1.0]), np.array([0.5])])
    V = np.array([[2.0]])
    g_down = [np.array([0.3]), np.array([-0.2])]
    layer.compute_gradients(V, g_down, 2)

    a = layer.recurrent_tree.weights[0, 0]
    g_last = 2.0 * -0.2
    np.testing.assert_allclose(layer.computed_recurrent_gradients[1], [g_last])
    np.testing.assert_allclose(layer.computed_recurrent_gradients[0], [2.0 * 0.3 + a * g_last])
    np.testing.assert_allclose(layer.computed_output_gradients[0], [0.6])
    np.testing.assert_allclose(layer.computed_output_gradients[1], [-0.4])


def test_update_weights_sums_every_step():
    layer = _layer(input_count=1, output_count=1, state_size=1, act=IDENTITY)
    seq = [np.array([1.0]), np.array([0.5]), np.array([-1.0])]
    _run(layer, seq)
    layer.compute_gradients(np.array([[1.0]]), [np.array([0.1]), np.array([0.2]), np.array([0.3])], 3)
    before_out = layer.output_tree.weights.copy()
    before_rec = layer.recurrent_tree.weights.copy()

    layer.update_weights(0.5, 3)

    d_out = np.zeros_like(before_out)
    d_rec = np.zeros_like(before_rec)
    for t in range(3):
        c = np.concatenate([layer.prev_states[t] if t > 0 else [0.0], seq[t]])
        d_out += 0.5 * np.outer(layer.computed_output_gradients[t], c)
        d_rec += 0.5 * np.outer(layer.computed_recurrent_gradients[t], c)
    np.testing.assert_allclose(layer.output_tree.weights, before_out + d_out)
    np.testing.assert_allclose(layer.recurrent_tree.weights, before_rec + d_rec)


def test_update_biases_moves_output_tree_only():
    layer = _layer(input_count=1, output_count=1, state_size=2)
    _run(layer, [np.array([1.0]), np.array([0.5])])
    layer.compute_gradients(np.array([[1.0]]), [np.array([0.5]), np.array([0.5])], 2)
    rec_biases = layer.recurrent_tree.biases.copy()
    out_biases = layer.output_tree.biases.copy()
    layer.update_biases(0.1, 2)
    expected = out_biases + 0.1 * (layer.computed_output_gradients[0] + layer.computed_output_gradients[1])
    np.testing.assert_allclose(layer.output_tree.biases, expected)
    # recurrent biases are intentionally left alone
    np.testing.assert_array_equal(layer.recurrent_tree.biases, rec_biases)


def test_bounds_are_checked_against_sequence_len():
    layer = _layer()
    _run(layer, [np.ones(2), np.ones(2)])
    with pytest.raises(ValueError):
        layer.compute_gradients(np.ones((1, 1)), [np.ones(1)] * 3, 3)
    with pytest.raises(ValueError):
        layer.compute_gradients(np.ones((1, 1)), [np.ones(1)], 2)
    layer.compute_gradients(np.ones((1, 1)), [np.ones(1)] * 2, 2)
    with pytest.raises(ValueError):
        layer.update_weights(0.1, 3)
