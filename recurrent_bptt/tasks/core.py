# MIT License
# Toy sequence tasks used to check that training converges.
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import numpy as np

Example = Tuple[List[np.ndarray], List[Optional[np.ndarray]]]


@dataclass
class ConstantTargetTask:
    """Fixed inputs, every step supervised towards the same constant."""

    inputs: tuple = (1.0, 0.5)
    target: float = 0.0

    def sample(self) -> Example:
        seq = [np.array([float(x)]) for x in self.inputs]
        return seq, [np.array([float(self.target)]) for _ in seq]


@dataclass
class EchoTask:
    """Output the current input."""

    inputs: tuple = (1.0, 0.5, 1.0, 0.5)

    def sample(self) -> Example:
        seq = [np.array([float(x)]) for x in self.inputs]
        return seq, [x.copy() for x in seq]


@dataclass
class LagMemoryTask:
    """
    Output the input seen ``lag`` steps earlier. Inputs are drawn from
    U[low, high); sequence lengths from ``min_len`` up to ``max_len - 1``.
    The first ``lag`` steps have nothing to recall and are left unsupervised.
    """

    lag: int = 1
    input_size: int = 1
    min_len: int = 2
    max_len: int = 10
    low: float = -1.0
    high: float = 1.0
    seed: Optional[int] = None
    _rng: np.random.RandomState = field(init=False, repr=False)

    def __post_init__(self):
        if self.lag < 0:
            raise ValueError(f"lag must be non-negative, got {self.lag}")
        if not (1 <= self.min_len < self.max_len):
            raise ValueError(f"need 1 <= min_len < max_len, got {self.min_len}, {self.max_len}")
        self._rng = np.random.RandomState(self.seed)

    def sample(self) -> Example:
        n = int(self._rng.randint(self.min_len, self.max_len))
        seq = [self._rng.uniform(self.low, self.high, size=self.input_size) for _ in range(n)]
        expected = [None if i < self.lag else seq[i - self.lag].copy() for i in range(n)]
        return seq, expected
