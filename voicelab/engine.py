"""Voice analysis engine: frame loop plus the idle/recording/analyzing cycle.

Usage:
    engine = VoiceAnalysisEngine()
    engine.start_session()
    for frame in capture:                  # one call per incoming frame
        metrics = engine.process_frame(frame)
        if not engine.recording:           # session duration reached
            break
    else:
        engine.stop_session()
    result = engine.collect_result()

Frames may arrive on a capture callback thread while another thread starts
and stops sessions; all mutable state is guarded by one lock. The analysis
itself runs outside the lock on the frozen aggregate.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Optional

from . import config
from .analysis import AnalysisResult, analyze
from .frames import AudioFrame
from .pitch import estimate, hz_to_note
from .session import SessionAggregator, SessionOutcome, placeholder_aggregate
from .stability import PitchTracker

logger = logging.getLogger(__name__)

STATE_IDLE = "idle"
STATE_RECORDING = "recording"
STATE_ANALYZING = "analyzing"


class EngineStateError(Exception):
    """Raised when an operation is not valid in the engine's current state."""

    pass


class InsufficientSignalError(Exception):
    """Raised when a session captured no usable audio and no placeholder was allowed."""

    def __init__(self, outcome: SessionOutcome):
        self.outcome = outcome
        super().__init__(
            "Insufficient signal: no frame exceeded the energy floor "
            f"({outcome.aggregate.frames_observed} frames observed). Please retry."
        )


@dataclass(frozen=True)
class LiveMetrics:
    """Per-frame values for real-time display."""
    rms: float
    pitch_hz: Optional[float]
    jitter: Optional[float]
    note: Optional[str]
    audio_detected: bool
    recording: bool
    elapsed_sec: float = 0.0


class VoiceAnalysisEngine:
    """Owns the pitch tracker and session aggregator for one audio source."""

    def __init__(
        self,
        session_seconds: float = config.SESSION_SECONDS,
        history_capacity: int = config.HISTORY_CAPACITY,
    ):
        if session_seconds <= 0:
            raise ValueError(f"session_seconds must be positive, got {session_seconds}")
        self.session_seconds = session_seconds
        self.tracker = PitchTracker(capacity=history_capacity)
        self.aggregator = SessionAggregator(self.tracker)
        self._state = STATE_IDLE
        self._outcome: Optional[SessionOutcome] = None
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        return self._state

    @property
    def recording(self) -> bool:
        return self._state == STATE_RECORDING

    @property
    def outcome(self) -> Optional[SessionOutcome]:
        """Frozen outcome of the last session while it awaits analysis."""
        return self._outcome

    # ---- Session control ----

    def start_session(self) -> None:
        with self._lock:
            if self._state != STATE_IDLE:
                raise EngineStateError(f"Cannot start a session while {self._state}")
            self.aggregator.start()
            self._outcome = None
            self._state = STATE_RECORDING
        logger.info("Recording started (%.1f s session)", self.session_seconds)

    def stop_session(self) -> SessionOutcome:
        """Explicit stop. Whatever was observed so far becomes the outcome."""
        with self._lock:
            if self._state != STATE_RECORDING:
                raise EngineStateError(f"Cannot stop a session while {self._state}")
            return self._finish_locked("stopped")

    def _finish_locked(self, reason: str) -> SessionOutcome:
        self._outcome = self.aggregator.finish()
        self._state = STATE_ANALYZING
        logger.info("Recording %s after %.2f s: %s", reason,
                    self._outcome.aggregate.duration_sec, self._outcome.status)
        return self._outcome

    # ---- Per-frame processing ----

    def process_frame(self, frame: AudioFrame) -> LiveMetrics:
        """Estimate one frame; fold it into the session when recording.

        Reaching the session duration ends the recording automatically.
        """
        est = estimate(frame)

        with self._lock:
            jitter = None
            recording = self._state == STATE_RECORDING
            if recording:
                jitter = self.aggregator.observe(est, frame.duration_sec)
                if self.aggregator.current.duration_sec >= self.session_seconds:
                    self._finish_locked("timed out")
            elapsed = self.aggregator.current.duration_sec

        return LiveMetrics(
            rms=est.rms,
            pitch_hz=est.pitch_hz,
            jitter=jitter,
            note=hz_to_note(est.pitch_hz) if est.pitch_hz else None,
            audio_detected=frame.peak_amplitude > config.AUDIO_DETECT_LEVEL,
            recording=recording,
            elapsed_sec=elapsed,
        )

    # ---- Analysis ----

    def collect_result(
        self,
        allow_placeholder: bool = False,
        timestamp: Optional[str] = None,
    ) -> AnalysisResult:
        """Analyze the finished session and return to idle.

        Parameters
        ----------
        allow_placeholder : bool
            If the session captured no usable signal, analyze a fixed
            placeholder (flagged on the result) instead of raising.
        timestamp : str, optional
            ISO timestamp for the result; defaults to now (UTC).

        Raises
        ------
        EngineStateError
            No finished session is waiting.
        InsufficientSignalError
            Silent session and ``allow_placeholder`` is False.
        """
        with self._lock:
            if self._state != STATE_ANALYZING:
                raise EngineStateError(f"No finished session to analyze (state: {self._state})")
            outcome = self._outcome

        try:
            if outcome.measured:
                aggregate = outcome.aggregate
            elif allow_placeholder:
                logger.warning("No usable signal captured; analyzing flagged placeholder values")
                aggregate = placeholder_aggregate()
            else:
                raise InsufficientSignalError(outcome)
            return analyze(aggregate, timestamp=timestamp)
        finally:
            with self._lock:
                self._state = STATE_IDLE
                self._outcome = None

    def cancel(self) -> None:
        """Drop any session in progress or awaiting analysis."""
        with self._lock:
            if self._state == STATE_RECORDING:
                self.aggregator.finish()
            self._state = STATE_IDLE
            self._outcome = None
        logger.info("Session cancelled")

    def run(
        self,
        frames: Iterable[AudioFrame],
        allow_placeholder: bool = False,
    ) -> AnalysisResult:
        """Record one session from an iterable of frames and analyze it.

        Stops at the session duration or when the frames run out.
        """
        self.start_session()
        try:
            for frame in frames:
                self.process_frame(frame)
                if not self.recording:
                    break
            if self.recording:
                self.stop_session()
        except Exception:
            self.cancel()
            raise
        return self.collect_result(allow_placeholder=allow_placeholder)
