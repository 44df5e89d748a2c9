# MIT License
# Cost functions for the terminal output layer.
from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True)
class MeanSquaredError:
    name: str = "mean_squared_error"

    def costs(self, actual, expected):
        d = np.asarray(expected, dtype=float) - np.asarray(actual, dtype=float)
        return 0.5 * d * d

    def gradient(self, actual, expected):
        """Negative derivative of the cost, i.e. the direction that lowers it."""
        return np.asarray(expected, dtype=float) - np.asarray(actual, dtype=float)


MEAN_SQUARED_ERROR = MeanSquaredError()
