"""Tests for the API endpoints (using FastAPI TestClient)."""

import io
import struct

import numpy as np
from fastapi.testclient import TestClient

from server.app.main import app

client = TestClient(app)


def _make_wav_bytes(duration_sec: float = 2.0, sr: int = 16000, amplitude: float = 0.5) -> bytes:
    """Generate a valid WAV file as bytes (sine wave)."""
    n_samples = int(sr * duration_sec)
    t = np.arange(n_samples) / sr
    # 220 Hz sine wave with a little noise
    rng = np.random.default_rng(0)
    audio = amplitude * np.sin(2 * np.pi * 220 * t)
    if amplitude > 0:
        audio += 0.01 * rng.standard_normal(n_samples)

    # Build WAV manually (16-bit PCM)
    audio_int16 = (np.clip(audio, -1.0, 1.0) * 32767).astype(np.int16)
    data_bytes = audio_int16.tobytes()

    wav = io.BytesIO()
    # RIFF header
    wav.write(b"RIFF")
    wav.write(struct.pack("<I", 36 + len(data_bytes)))
    wav.write(b"WAVE")
    # fmt chunk
    wav.write(b"fmt ")
    wav.write(struct.pack("<I", 16))           # chunk size
    wav.write(struct.pack("<H", 1))            # PCM
    wav.write(struct.pack("<H", 1))            # mono
    wav.write(struct.pack("<I", sr))           # sample rate
    wav.write(struct.pack("<I", sr * 2))       # byte rate
    wav.write(struct.pack("<H", 2))            # block align
    wav.write(struct.pack("<H", 16))           # bits per sample
    # data chunk
    wav.write(b"data")
    wav.write(struct.pack("<I", len(data_bytes)))
    wav.write(data_bytes)

    return wav.getvalue()


class TestHealthEndpoint:
    def test_health_returns_ok(self):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["session_seconds"] > 0
        assert "version" in data
        assert "uptime_seconds" in data


class TestRootEndpoint:
    def test_root(self):
        resp = client.get("/")
        assert resp.status_code == 200
        data = resp.json()
        assert data["app"] == "VoiceLab"
        assert data["health"] == "/api/v1/health"


class TestAnalyzeEndpoint:
    def test_analyze_sine(self):
        resp = client.post(
            "/api/v1/analyze",
            files={"audio": ("a.wav", _make_wav_bytes(), "audio/wav")},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "success"
        assert data["signal_source"] == "measured"
        assert abs(data["pitch_hz"] - 220) / 220 < 0.02
        assert data["note"] == "A3"
        assert data["risk_level"] in ("Low", "Medium", "High")
        assert 0 <= data["quality_score"] <= 100
        assert data["session"]["frames_observed"] > 0
        assert data["recommendations"][-1].startswith("This screening tool")
        assert "processing_time_ms" in data

    def test_analyze_with_invalid_audio(self):
        """Garbage bytes should return 400."""
        resp = client.post(
            "/api/v1/analyze",
            files={"audio": ("a.wav", b"not audio", "audio/wav")},
        )
        assert resp.status_code == 400

    def test_analyze_too_short(self):
        resp = client.post(
            "/api/v1/analyze",
            files={"audio": ("a.wav", _make_wav_bytes(duration_sec=0.2), "audio/wav")},
        )
        assert resp.status_code == 400

    def test_silent_recording_returns_422(self):
        resp = client.post(
            "/api/v1/analyze",
            files={"audio": ("a.wav", _make_wav_bytes(amplitude=0.0), "audio/wav")},
        )
        assert resp.status_code == 422
        assert "Insufficient signal" in resp.json()["detail"]

    def test_silent_recording_with_placeholder(self):
        resp = client.post(
            "/api/v1/analyze",
            files={"audio": ("a.wav", _make_wav_bytes(amplitude=0.0), "audio/wav")},
            data={"allow_placeholder": "true"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["signal_source"] == "placeholder"
        assert data["pitch_hz"] == 160.0
