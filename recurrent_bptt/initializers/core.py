# MIT License
# Weight/bias initializer strategies, invoked once per index at construction.
from typing import Optional
import numpy as np


def constant(value: float = 0.0):
    v = float(value)

    def init(*_ix) -> float:
        return v

    return init


def uniform(low: float = 0.0, high: float = 0.1, seed: Optional[int] = None):
    """Draw every weight independently from U[low, high)."""
    if high < low:
        raise ValueError(f"uniform initializer needs low <= high, got ({low}, {high})")
    rng = np.random.RandomState(seed)

    def init(*_ix) -> float:
        return float(rng.uniform(low, high))

    return init


def scaled_normal(scale: float = 0.1, seed: Optional[int] = None):
    rng = np.random.RandomState(seed)

    def init(*_ix) -> float:
        return float(scale * rng.randn())

    return init
