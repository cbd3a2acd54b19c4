"""Tests for per-frame energy and pitch estimation."""

import numpy as np
import pytest

from voicelab import pitch
from voicelab.frames import AudioFrame
from voicelab.pitch import (
    METHOD_AUTOCORRELATION,
    METHOD_SPECTRAL,
    autocorrelation_pitch,
    estimate,
    frame_rms,
    hz_to_note,
    normalized_autocorrelation,
    spectral_peak_pitch,
)


def _sine(freq, sr=16000, n=2048, amplitude=0.5, phase=0.0):
    t = np.arange(n) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t + phase)).astype(np.float32)


def _vowel(f0, sr=16000, n=2048, seed=0):
    """Harmonic-rich vowel-like frame with a little noise."""
    t = np.arange(n) / sr
    signal = np.zeros(n, dtype=np.float32)
    for k in range(1, 6):
        signal += (1.0 / k) * np.sin(2 * np.pi * f0 * k * t).astype(np.float32)
    rng = np.random.default_rng(seed)
    signal += 0.01 * rng.standard_normal(n).astype(np.float32)
    return 0.1 * signal


class TestEnergy:
    def test_rms_of_sine(self):
        assert frame_rms(_sine(200, amplitude=0.5)) == pytest.approx(0.5 / np.sqrt(2), rel=0.01)

    def test_silence_has_no_pitch(self):
        est = estimate(AudioFrame(np.zeros(2048, dtype=np.float32), 16000))
        assert est.rms == 0.0
        assert est.pitch_hz is None
        assert not est.voiced

    @pytest.mark.parametrize("amplitude", [0.0001, 0.0005, 0.0012])
    def test_energy_gate(self, amplitude):
        frame = AudioFrame(_sine(220, amplitude=amplitude), 16000)
        est = estimate(frame)
        assert est.rms < 0.001
        assert est.pitch_hz is None


class TestAutocorrelation:
    def test_normalized_at_lag_zero(self):
        ac = normalized_autocorrelation(_sine(200), 50)
        assert ac[0] == pytest.approx(1.0)
        assert np.all(ac <= 1.0 + 1e-9)

    def test_zero_energy_gives_zeros(self):
        ac = normalized_autocorrelation(np.zeros(512), 10)
        assert np.all(ac == 0)

    @pytest.mark.parametrize("freq", [60.0, 100.0, 150.0, 220.0, 440.0, 660.0])
    def test_sine_within_two_percent_16k(self, freq):
        est = estimate(AudioFrame(_sine(freq), 16000))
        assert est.pitch_hz is not None
        assert est.method == METHOD_AUTOCORRELATION
        assert abs(est.pitch_hz - freq) / freq < 0.02

    @pytest.mark.parametrize("freq", [80.0, 300.0, 700.0])
    def test_sine_within_two_percent_44k(self, freq):
        est = estimate(AudioFrame(_sine(freq, sr=44100, n=4096), 44100))
        assert est.pitch_hz is not None
        assert abs(est.pitch_hz - freq) / freq < 0.02

    @pytest.mark.parametrize("freq", [372.0, 456.0, 519.0, 596.0])
    def test_period_between_whole_lags_8k(self, freq):
        est = estimate(AudioFrame(_sine(freq, sr=8000), 8000))
        assert est.pitch_hz is not None
        assert abs(est.pitch_hz - freq) / freq < 0.02

    def test_sweep_8k(self):
        misses = []
        for freq in np.linspace(55.0, 780.0, 146):
            est = estimate(AudioFrame(_sine(freq, sr=8000), 8000))
            if est.pitch_hz is None or abs(est.pitch_hz - freq) / freq >= 0.02:
                misses.append((round(float(freq), 1), est.pitch_hz))
        assert misses == []

    @pytest.mark.parametrize("sr", [44100, 48000])
    @pytest.mark.parametrize("freq", [57.0, 60.0, 64.0])
    def test_low_pitch_at_high_rates(self, sr, freq):
        est = estimate(AudioFrame(_sine(freq, sr=sr, n=4096), sr))
        assert est.pitch_hz is not None
        assert abs(est.pitch_hz - freq) / freq < 0.02

    @pytest.mark.parametrize("phase", [0.0, 0.7, 2.1])
    def test_phase_does_not_matter(self, phase):
        est = estimate(AudioFrame(_sine(180, phase=phase), 16000))
        assert abs(est.pitch_hz - 180) / 180 < 0.02

    @pytest.mark.parametrize("f0", [110.0, 180.0, 250.0])
    def test_harmonic_vowel_reports_fundamental(self, f0):
        est = estimate(AudioFrame(_vowel(f0), 16000))
        assert est.pitch_hz is not None
        assert abs(est.pitch_hz - f0) / f0 < 0.02

    def test_dc_offset_removed(self):
        frame = _sine(200, amplitude=0.2) + 0.3
        f0, corr = autocorrelation_pitch(frame, 16000)
        assert f0 == pytest.approx(200, rel=0.02)
        assert corr > 0.5


class TestSpectralFallback:
    def test_spectral_peak_of_tone(self):
        sr, n = 16000, 2048
        f0 = spectral_peak_pitch(_sine(300, sr=sr, n=n), sr)
        assert f0 is not None
        assert abs(f0 - 300) <= sr / n

    def test_spectral_peak_ignores_out_of_band(self):
        # Only energy at 1500 Hz: the in-band maximum is leakage far below the floor.
        assert spectral_peak_pitch(_sine(1500, amplitude=0.001), 16000) is None

    def test_spectral_floor(self):
        assert spectral_peak_pitch(_sine(200, amplitude=1e-5), 16000) is None

    def test_fallback_used_when_autocorrelation_fails(self, monkeypatch):
        monkeypatch.setattr(pitch, "autocorrelation_pitch", lambda x, sr: (None, 0.0))
        est = estimate(AudioFrame(_sine(200), 16000))
        assert est.method == METHOD_SPECTRAL
        assert abs(est.pitch_hz - 200) <= 16000 / 2048

    def test_no_fallback_below_energy_floor(self, monkeypatch):
        called = []
        monkeypatch.setattr(pitch, "spectral_peak_pitch", lambda x, sr: called.append(1))
        estimate(AudioFrame(_sine(200, amplitude=0.0005), 16000))
        assert called == []


class TestPlausibility:
    @pytest.mark.parametrize("fake_pitch", [30.0, 49.9, 800.5, 1200.0])
    def test_implausible_pitch_rejected(self, monkeypatch, fake_pitch):
        monkeypatch.setattr(pitch, "autocorrelation_pitch", lambda x, sr: (fake_pitch, 0.9))
        est = estimate(AudioFrame(_sine(200), 16000))
        assert est.pitch_hz is None
        assert est.rms > 0

    def test_noise_never_outside_range(self):
        rng = np.random.default_rng(3)
        for _ in range(5):
            est = estimate(AudioFrame(0.05 * rng.standard_normal(2048), 16000))
            if est.pitch_hz is not None:
                assert 50.0 <= est.pitch_hz <= 800.0

    def test_estimate_is_pure(self):
        frame = AudioFrame(_vowel(140), 16000)
        assert estimate(frame) == estimate(frame)


class TestNoteNames:
    @pytest.mark.parametrize("freq,note", [
        (440.0, "A4"), (261.63, "C4"), (130.81, "C3"), (880.0, "A5"),
        (82.41, "E2"), (466.16, "A#4"),
    ])
    def test_known_notes(self, freq, note):
        assert hz_to_note(freq) == note

    def test_non_positive_rejected(self):
        with pytest.raises(ValueError):
            hz_to_note(0.0)
