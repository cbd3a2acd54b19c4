"""Session-level aggregation of per-frame estimates.

Per-frame voiced/unvoiced decisions are sparse and noisy, so the end-of-session
read uses peak values: the loudest, most clearly voiced frames dominate rather
than being diluted by silent ones.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from . import config
from .pitch import FrameEstimate
from .stability import PitchTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionAggregate:
    peak_rms: float = 0.0
    peak_pitch_hz: Optional[float] = None
    peak_jitter: Optional[float] = None
    pitch_stability: Optional[float] = None   # None: too little pitch history
    pitch_history: tuple[float, ...] = ()
    frames_observed: int = 0
    voiced_frames: int = 0
    duration_sec: float = 0.0
    placeholder: bool = False

    @property
    def has_signal(self) -> bool:
        return self.peak_rms > 0


def placeholder_aggregate() -> SessionAggregate:
    """Fixed stand-in used only when a caller accepts one for a silent session."""
    return SessionAggregate(placeholder=True, **config.PLACEHOLDER_FEATURES)


@dataclass(frozen=True)
class SessionOutcome:
    status: str   # OUTCOME_MEASURED or OUTCOME_INSUFFICIENT
    aggregate: SessionAggregate = field(default_factory=SessionAggregate)

    @property
    def measured(self) -> bool:
        return self.status == config.OUTCOME_MEASURED


class SessionAggregator:
    """Tracks peak energy, pitch and jitter over one recording session.

    Owns no history of its own; voiced pitches are forwarded to the
    :class:`PitchTracker` it was given, which is reset on :meth:`start`.
    """

    def __init__(self, tracker: Optional[PitchTracker] = None):
        self.tracker = tracker or PitchTracker()
        self._aggregate = SessionAggregate()
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def current(self) -> SessionAggregate:
        return self._aggregate

    def start(self) -> None:
        self.tracker.reset()
        self._aggregate = SessionAggregate()
        self._active = True

    def observe(self, estimate: FrameEstimate, duration_sec: float = 0.0) -> Optional[float]:
        """Fold one frame estimate into the session peaks.

        Returns the tracker's current jitter (None until enough history).
        """
        if not self._active:
            raise RuntimeError("observe() called outside an active session")

        agg = self._aggregate
        updates = {
            "peak_rms": max(agg.peak_rms, estimate.rms),
            "frames_observed": agg.frames_observed + 1,
            "duration_sec": agg.duration_sec + duration_sec,
        }

        jitter = None
        if estimate.pitch_hz is not None:
            self.tracker.accept(estimate.pitch_hz)
            jitter = self.tracker.jitter()
            updates["voiced_frames"] = agg.voiced_frames + 1
            updates["peak_pitch_hz"] = max(agg.peak_pitch_hz or 0.0, estimate.pitch_hz)
            if jitter is not None:
                updates["peak_jitter"] = max(agg.peak_jitter or 0.0, jitter)

        self._aggregate = replace(agg, **updates)
        return jitter

    def finish(self) -> SessionOutcome:
        """Freeze the aggregate. Valid at any point, including mid-session stops."""
        self._active = False
        aggregate = replace(
            self._aggregate,
            pitch_history=self.tracker.snapshot(),
            pitch_stability=self.tracker.stability() if self.tracker.has_stability() else None,
        )
        self._aggregate = aggregate

        if aggregate.peak_rms < config.RMS_FLOOR:
            logger.warning(
                "Session captured no usable signal (%d frames, peak RMS %.5f)",
                aggregate.frames_observed, aggregate.peak_rms,
            )
            return SessionOutcome(status=config.OUTCOME_INSUFFICIENT, aggregate=aggregate)

        logger.info(
            "Session finished: %d frames (%d voiced), peak RMS %.4f, peak F0 %s, peak jitter %s",
            aggregate.frames_observed, aggregate.voiced_frames, aggregate.peak_rms,
            f"{aggregate.peak_pitch_hz:.1f} Hz" if aggregate.peak_pitch_hz else "n/a",
            f"{aggregate.peak_jitter:.4f}" if aggregate.peak_jitter is not None else "n/a",
        )
        return SessionOutcome(status=config.OUTCOME_MEASURED, aggregate=aggregate)
