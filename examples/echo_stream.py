"""Minimal example showing manual wiring of the network and a task."""

import numpy as np

from recurrent_bptt.entrypoints import load, resolve
from recurrent_bptt.rnn.network import build_network

if __name__ == "__main__":
    net = build_network(
        1, 1, 2,
        recurrent_activation=resolve("recurrent_bptt.activations", "tanh"),
        init_recurrent_weights=load("recurrent_bptt.initializers", "uniform", low=-0.1, high=0.1, seed=0),
        seed=0,
    )
    task = load("recurrent_bptt.tasks", "lag_memory", lag=1, seed=0)
    for t in range(500):
        seq, expected = task.sample()
        cost = net.train_one_sequence(seq, expected, 0.05)
        if t % 100 == 0:
            print(t, cost)
    seq = [np.array([x]) for x in (0.5, -0.3, 0.8, 0.1)]
    print("inputs ", [float(x[0]) for x in seq])
    print("outputs", [round(float(y[0]), 3) for y in net.predict(seq)])
