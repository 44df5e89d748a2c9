import math
from collections import deque


class MetricTracker:
    """Running view of the training cost. The engine never checks for NaN; this does."""

    def __init__(self, window=50, ema=0.9):
        self._cost_sum = 0.0
        self._cost_n = 0
        self._ema = None
        self._ema_k = float(ema)
        self._buf = deque(maxlen=window)
        self.non_finite = 0

    def update_cost(self, cost):
        c = float(cost)
        if not math.isfinite(c):
            self.non_finite += 1
            return c
        self._cost_sum += c
        self._cost_n += 1
        self._buf.append(c)
        self._ema = c if self._ema is None else self._ema_k * self._ema + (1.0 - self._ema_k) * c
        return c

    @property
    def window_mean(self):
        if not self._buf:
            return float("nan")
        return sum(self._buf) / len(self._buf)

    @property
    def ema(self):
        return float("nan") if self._ema is None else float(self._ema)

    def snapshot(self):
        return {
            "cost_mean": (self._cost_sum / max(1, self._cost_n)),
            "cost_window": self.window_mean,
            "cost_ema": self.ema,
            "non_finite": self.non_finite,
        }
