"""Rolling pitch history with jitter and stability metrics."""

from collections import deque
from typing import Optional

import numpy as np

from . import config


class PitchTracker:
    """Bounded FIFO of accepted pitch estimates for the current session.

    The oldest value is evicted once ``capacity`` is exceeded. Call
    :meth:`reset` when a new recording starts; history carried over from a
    previous session would distort the jitter estimate.
    """

    def __init__(self, capacity: int = config.HISTORY_CAPACITY):
        if capacity < 2:
            raise ValueError(f"capacity must be at least 2, got {capacity}")
        self.capacity = capacity
        self._history: deque[float] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._history)

    def accept(self, pitch_hz: float) -> None:
        self._history.append(float(pitch_hz))

    def reset(self) -> None:
        self._history.clear()

    def snapshot(self) -> tuple[float, ...]:
        return tuple(self._history)

    def _diffs(self) -> np.ndarray:
        return np.diff(np.asarray(self._history, dtype=np.float64))

    def jitter(self) -> Optional[float]:
        """Relative jitter: sd / mean of absolute successive pitch differences.

        Returns None with fewer than ``JITTER_MIN_HISTORY`` entries, or when
        the pitch never changed (mean difference of zero).
        """
        if len(self._history) < config.JITTER_MIN_HISTORY:
            return None
        deltas = np.abs(self._diffs())
        mean = float(np.mean(deltas))
        if mean == 0:
            return None
        return float(np.std(deltas)) / mean

    def stability(self) -> float:
        """Pitch stability in [0, 1]; 1 means no frame-to-frame movement.

        ``1 - rms(successive differences) / 100``. Neutral (0.5) until there
        is enough history to say anything.
        """
        if len(self._history) < config.STABILITY_MIN_HISTORY:
            return config.NEUTRAL_STABILITY
        rms_diff = float(np.sqrt(np.mean(np.square(self._diffs()))))
        return float(np.clip(1.0 - rms_diff / 100.0, 0.0, 1.0))

    def has_stability(self) -> bool:
        return len(self._history) >= config.STABILITY_MIN_HISTORY
