"""Per-frame energy and fundamental frequency estimation.

Pitch is found with a normalized autocorrelation over the lag range that
covers voiced human speech (50-800 Hz). Of the candidate peaks, the shortest
period whose refined height is close to the best is taken, which keeps
sub-harmonics from winning. When autocorrelation finds no usable
periodicity but the frame carries energy, the strongest spectral peak in the
80-800 Hz band is used instead. Estimates outside 50-800 Hz are discarded.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy import fft, signal

from . import config
from .frames import AudioFrame, max_lag, min_lag

logger = logging.getLogger(__name__)

METHOD_AUTOCORRELATION = "autocorrelation"
METHOD_SPECTRAL = "spectral"

_NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]


@dataclass(frozen=True)
class FrameEstimate:
    rms: float
    pitch_hz: Optional[float] = None
    method: Optional[str] = None  # which estimator produced pitch_hz

    @property
    def voiced(self) -> bool:
        return self.pitch_hz is not None


def frame_rms(samples: np.ndarray) -> float:
    return float(np.sqrt(np.mean(np.square(samples, dtype=np.float64))))


def normalized_autocorrelation(samples: np.ndarray, n_lags: int) -> np.ndarray:
    """Autocorrelation for lags ``0..n_lags-1`` divided by the lag-0 energy.

    ``r[k] = sum(x[i] * x[i + k]) / sum(x[i] ** 2)``. Returns zeros for a
    frame with no energy.
    """
    x = np.asarray(samples, dtype=np.float64)
    full = signal.correlate(x, x, mode="full", method="auto")
    ac = full[len(x) - 1:len(x) - 1 + n_lags]
    energy = ac[0]
    if energy <= 0:
        return np.zeros_like(ac)
    return ac / energy


def _parabolic_peak(values: np.ndarray, idx: int) -> tuple[float, float]:
    """Sub-sample (offset, height) of the peak at ``idx`` from a fitted parabola."""
    if idx <= 0 or idx >= len(values) - 1:
        return 0.0, float(values[idx])
    a, b, c = values[idx - 1], values[idx], values[idx + 1]
    denom = a - 2.0 * b + c
    if denom >= 0:
        return 0.0, float(b)
    offset = float(np.clip(0.5 * (a - c) / denom, -0.5, 0.5))
    return offset, float(b - 0.25 * (a - c) * offset)


def _first_strong_peak(values: np.ndarray, start: int, stop: int) -> int:
    """Shortest lag in ``[start, stop]`` whose refined peak is near the best one.

    Heights are compared after sub-sample refinement, so a period that falls
    between two whole lags does not lose to its own double.
    """
    window = values[start - 1:stop + 2]
    peaks, _ = signal.find_peaks(window)
    peaks = peaks + start - 1
    peaks = peaks[(peaks >= start) & (peaks <= stop)]
    if peaks.size == 0:
        return start + int(np.argmax(values[start:stop + 1]))

    heights = np.array([_parabolic_peak(values, int(p))[1] for p in peaks])
    best = heights.max()
    if best <= 0:
        return int(peaks[np.argmax(heights)])
    return int(peaks[np.flatnonzero(heights >= config.OCTAVE_TOLERANCE * best)[0]])


def autocorrelation_pitch(
    samples: np.ndarray, sample_rate: int,
) -> tuple[Optional[float], float]:
    """Estimate F0 from the normalized autocorrelation.

    Parameters
    ----------
    samples : np.ndarray
        Frame samples; the DC offset is removed here.
    sample_rate : int

    Returns
    -------
    (pitch_hz or None, best correlation)
    """
    x = np.asarray(samples, dtype=np.float64)
    x = x - x.mean()
    n = len(x)

    lo, hi = min_lag(sample_rate), max_lag(sample_rate)
    ac = normalized_autocorrelation(x, min(hi + 2, n))
    stop = min(hi, len(ac) - 2)

    # Peak picking runs on the estimate with the n / (n - k) taper undone, so
    # repeated periods compare on equal terms and peaks are not pulled short.
    flat = ac * n / (n - np.arange(len(ac)))

    # Skip the main lobe around lag 0, otherwise a slowly varying (low) voice
    # always wins at the shortest lag.
    negative = np.flatnonzero(ac[1:stop + 1] < 0)
    start = max(lo, int(negative[0]) + 1) if negative.size else lo
    if start > stop:
        return None, 0.0

    best_lag = _first_strong_peak(flat, start, stop)
    best_corr = float(ac[best_lag])
    if best_corr <= config.MIN_CORRELATION:
        return None, best_corr

    offset, _ = _parabolic_peak(flat, best_lag)
    return sample_rate / (best_lag + offset), best_corr


def spectral_peak_pitch(samples: np.ndarray, sample_rate: int) -> Optional[float]:
    """Frequency of the strongest spectral peak inside the voice band.

    The spectrum is Hann-windowed and scaled so a pure tone of amplitude A
    peaks near A. Returns None when the peak is below the level floor.
    """
    x = np.asarray(samples, dtype=np.float64)
    x = x - x.mean()
    window = signal.get_window("hann", len(x))
    spectrum = np.abs(fft.rfft(x * window)) * 2.0 / window.sum()
    freqs = fft.rfftfreq(len(x), d=1.0 / sample_rate)

    band_lo, band_hi = config.SPECTRAL_BAND_HZ
    in_band = np.flatnonzero((freqs >= band_lo) & (freqs <= band_hi))
    if in_band.size == 0:
        return None

    peak = int(in_band[np.argmax(spectrum[in_band])])
    level_db = 20.0 * math.log10(spectrum[peak] + 1e-12)
    if level_db <= config.SPECTRAL_PEAK_FLOOR_DB:
        return None
    return float(freqs[peak])


def estimate(frame: AudioFrame) -> FrameEstimate:
    """Compute RMS energy and F0 for one frame. Pure function of the frame."""
    rms = frame_rms(frame.samples)
    if rms < config.RMS_FLOOR:
        return FrameEstimate(rms=rms)

    pitch, corr = autocorrelation_pitch(frame.samples, frame.sample_rate)
    method = METHOD_AUTOCORRELATION
    if pitch is None:
        pitch = spectral_peak_pitch(frame.samples, frame.sample_rate)
        method = METHOD_SPECTRAL
        if pitch is not None:
            logger.debug("Spectral fallback: %.1f Hz (corr=%.3f)", pitch, corr)

    if pitch is None:
        return FrameEstimate(rms=rms)
    if not config.PITCH_MIN_HZ <= pitch <= config.PITCH_MAX_HZ:
        logger.debug("Rejected implausible pitch %.1f Hz", pitch)
        return FrameEstimate(rms=rms)

    logger.debug("Pitch %.1f Hz via %s, corr=%.3f, rms=%.4f", pitch, method, corr, rms)
    return FrameEstimate(rms=rms, pitch_hz=float(pitch), method=method)


def hz_to_note(freq_hz: float) -> str:
    """Nearest equal-tempered note name, e.g. 440.0 -> "A4"."""
    if freq_hz <= 0:
        raise ValueError(f"Frequency must be positive, got {freq_hz}")
    n = round(12 * math.log2(freq_hz / 440.0))
    name = _NOTE_NAMES[(n + 9) % 12]
    octave = 4 + (n + 9) // 12
    return f"{name}{octave}"
