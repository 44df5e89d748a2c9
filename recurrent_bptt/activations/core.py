# MIT License
# Activation functions shared by the dense sublayers.
from dataclasses import dataclass
from typing import Callable
import numpy as np

Array = np.ndarray


def _sigmoid(z):
    return 1.0 / (1.0 + np.exp(-z))


@dataclass(frozen=True)
class Activation:
    """Stateless activation capability; one instance may back many layers."""

    name: str
    fn: Callable[[Array], Array]
    grad: Callable[[Array], Array]

    def apply(self, z: Array) -> Array:
        return self.fn(z)

    def derivative(self, z: Array) -> Array:
        """Derivative with respect to the pre-activation ``z``."""
        return self.grad(z)


IDENTITY = Activation("identity", lambda z: np.array(z, dtype=float), lambda z: np.ones_like(z, dtype=float))
SIGMOID = Activation("sigmoid", _sigmoid, lambda z: _sigmoid(z) * (1.0 - _sigmoid(z)))
TANH = Activation("tanh", np.tanh, lambda z: 1.0 - np.tanh(z) ** 2)
RELU = Activation("relu", lambda z: np.maximum(0.0, z), lambda z: (np.asarray(z) > 0.0).astype(float))
