"""Audio frames: the unit of work handed to the pitch estimator.

A frame is a short, fixed-size window of mono time-domain samples normalized
to roughly [-1.0, 1.0], together with its sampling rate. Frames are validated
on construction so that malformed input fails loudly instead of silently
skewing a session.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np

from . import config


class FrameValidationError(Exception):
    """Raised when a frame cannot be analyzed (empty, wrong rate, etc.)."""

    pass


# Full-scale value per accepted PCM type; float input is taken as already normalized.
_PCM_SCALE = {
    np.dtype(np.int16): 32768.0,
    np.dtype(np.int32): 2147483648.0,
    np.dtype(np.float32): 1.0,
    np.dtype(np.float64): 1.0,
}


def audio_to_float(audio: np.ndarray) -> np.ndarray:
    """Convert int16/int32 PCM or float samples to float32 in [-1.0, 1.0].

    Raises
    ------
    FrameValidationError
        For any other sample type (bool, int64, unsigned, ...), whose scale
        cannot be inferred.
    """
    scale = _PCM_SCALE.get(audio.dtype)
    if scale is None:
        raise FrameValidationError(
            f"Unsupported sample type {audio.dtype} (expected int16, int32, float32 or float64)"
        )
    if scale == 1.0:
        return audio.astype(np.float32)
    return (audio.astype(np.float64) / scale).astype(np.float32)


def max_lag(sample_rate: int) -> int:
    """Longest autocorrelation lag searched at this rate (lowest pitch)."""
    return int(sample_rate // config.PITCH_MIN_HZ)


def min_lag(sample_rate: int) -> int:
    """Shortest autocorrelation lag searched at this rate (highest pitch)."""
    return int(sample_rate // config.PITCH_MAX_HZ)


def min_frame_size(sample_rate: int) -> int:
    """Fewest samples a frame needs at this rate: several periods of the lowest pitch."""
    return config.MIN_FRAME_PERIODS * max_lag(sample_rate)


@dataclass(frozen=True)
class AudioFrame:
    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        samples = np.asarray(self.samples)
        if samples.ndim != 1:
            raise FrameValidationError(
                f"Frame must be one-dimensional, got shape {samples.shape}"
            )
        if samples.size == 0:
            raise FrameValidationError("Frame is empty")
        if not config.MIN_SAMPLE_RATE <= self.sample_rate <= config.MAX_SAMPLE_RATE:
            raise FrameValidationError(
                f"Unsupported sample rate {self.sample_rate} Hz "
                f"(expected {config.MIN_SAMPLE_RATE}-{config.MAX_SAMPLE_RATE} Hz)"
            )
        if samples.size < min_frame_size(self.sample_rate):
            raise FrameValidationError(
                f"Frame of {samples.size} samples is too short for "
                f"{config.PITCH_MIN_HZ:.0f} Hz at {self.sample_rate} Hz "
                f"(need at least {min_frame_size(self.sample_rate)})"
            )
        samples = audio_to_float(samples)
        if not np.all(np.isfinite(samples)):
            raise FrameValidationError("Frame contains NaN or infinite samples")
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    @property
    def duration_sec(self) -> float:
        return self.samples.size / self.sample_rate

    @property
    def peak_amplitude(self) -> float:
        return float(np.max(np.abs(self.samples)))


def iter_frames(
    audio: np.ndarray,
    sample_rate: int,
    frame_size: int = config.FRAME_SIZE,
    hop: Optional[int] = None,
) -> Iterator[AudioFrame]:
    """Slice a recording into consecutive frames.

    Parameters
    ----------
    audio : np.ndarray
        Mono recording (int PCM or float).
    sample_rate : int
    frame_size : int
        Samples per frame.
    hop : int, optional
        Step between frame starts. Defaults to ``frame_size`` (no overlap).

    Yields
    ------
    AudioFrame
        A trailing remainder shorter than ``frame_size`` is dropped.
    """
    if hop is None:
        hop = frame_size
    if hop <= 0 or frame_size <= 0:
        raise FrameValidationError("frame_size and hop must be positive")
    audio = np.asarray(audio)
    for start in range(0, len(audio) - frame_size + 1, hop):
        yield AudioFrame(audio[start:start + frame_size], sample_rate)
