import math

import numpy as np

from recurrent_bptt.rnn.network import build_network
from recurrent_bptt.tasks.core import ConstantTargetTask, EchoTask, LagMemoryTask


def _train(net, task, iterations, learning_rate):
    cost = float("nan")
    for _ in range(iterations):
        seq, expected = task.sample()
        cost = net.train_one_sequence(seq, expected, learning_rate)
        assert math.isfinite(cost)
    return cost


def test_learns_to_output_zero():
    net = build_network(1, 1, 1, seed=0)
    cost = _train(net, ConstantTargetTask(inputs=(1.0, 0.5), target=0.0), 10, 0.25)
    assert cost < 1e-4


def test_learns_to_echo_input():
    net = build_network(1, 1, 1, seed=0)
    cost = _train(net, EchoTask(inputs=(1.0, 0.5, 1.0, 0.5)), 300, 0.05)
    assert cost < 1e-4


def test_remembers_previous_input():
    net = build_network(1, 1, 1, seed=0)
    cost = _train(net, LagMemoryTask(lag=1, seed=0), 1000, 0.05)
    assert cost < 1e-3


def _mean_cost(net, batch):
    return float(np.mean([net.forward_propagate(seq, expected)[0] / len(seq) for seq, expected in batch]))


def test_two_step_memory_improves_on_held_out_sequences():
    # the recursion only reaches the second state neuron through the first, so
    # this task plateaus above the one-step task; check it learns, not that it converges
    net = build_network(1, 1, 2, seed=0)
    held_out = LagMemoryTask(lag=2, seed=100)
    batch = [held_out.sample() for _ in range(200)]
    before = _mean_cost(net, batch)

    _train(net, LagMemoryTask(lag=2, seed=0), 1000, 0.01)

    after = _mean_cost(net, batch)
    assert before > 0.05
    assert after < 0.5 * before


def test_lag_memory_task_shape():
    task = LagMemoryTask(lag=2, seed=3)
    for _ in range(20):
        seq, expected = task.sample()
        assert 2 <= len(seq) < 10
        assert expected[0] is None and expected[1] is None
        for i in range(2, len(seq)):
            np.testing.assert_array_equal(expected[i], seq[i - 2])
