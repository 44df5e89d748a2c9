# MIT License
from typing import List
import numpy as np


def record_step(history: List[np.ndarray], step_ix: int, values) -> None:
    """Overwrite slot ``step_ix`` in place, or append when it is the next new slot."""
    if step_ix < 0 or step_ix > len(history):
        raise ValueError(f"step index {step_ix} out of order; {len(history)} steps recorded")
    if step_ix < len(history):
        history[step_ix][:] = values
    else:
        history.append(np.array(values, dtype=float))
