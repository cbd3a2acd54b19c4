"""Loading recorded audio for offline analysis.

Responsibilities:
  - Decode an audio file (path or raw bytes) to mono float32
  - Enforce size and duration limits
  - Resample to the engine's working rate
"""

import logging
import tempfile
from pathlib import Path
from typing import Union

import librosa
import numpy as np

from . import config

logger = logging.getLogger(__name__)

MIN_DURATION_SEC = 0.5
MAX_DURATION_SEC = 30.0
MAX_FILE_SIZE_MB = 10


class AudioValidationError(Exception):
    """Raised when a recording cannot be decoded or fails a limit check."""

    pass


def _decode(path: Union[str, Path]) -> tuple[np.ndarray, int]:
    try:
        audio, sr = librosa.load(str(path), sr=None, mono=True)
    except Exception as e:
        raise AudioValidationError(
            f"Could not read audio (WAV, FLAC and OGG are supported): {e}"
        ) from e
    return audio, int(sr)


def load_bytes(
    file_bytes: bytes,
    filename: str = "audio.wav",
    target_sr: int = config.DEFAULT_SAMPLE_RATE,
) -> tuple[np.ndarray, int]:
    """Decode an uploaded recording held in memory."""
    max_bytes = MAX_FILE_SIZE_MB * 1024 * 1024
    if len(file_bytes) > max_bytes:
        raise AudioValidationError(
            f"File too large: {len(file_bytes) / 1024 / 1024:.1f} MB "
            f"(maximum {MAX_FILE_SIZE_MB} MB)"
        )
    if not file_bytes:
        raise AudioValidationError("File is empty")

    suffix = Path(filename).suffix or ".wav"
    try:
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
            tmp.write(file_bytes)
            tmp_path = Path(tmp.name)
    except OSError as e:
        raise AudioValidationError(f"Could not buffer upload: {e}") from e

    try:
        audio, sr = _decode(tmp_path)
    finally:
        tmp_path.unlink(missing_ok=True)
    return _finalize(audio, sr, target_sr)


def load_file(
    path: Union[str, Path],
    target_sr: int = config.DEFAULT_SAMPLE_RATE,
) -> tuple[np.ndarray, int]:
    """Decode a recording from disk."""
    path = Path(path)
    if not path.is_file():
        raise AudioValidationError(f"No such file: {path}")
    audio, sr = _decode(path)
    return _finalize(audio, sr, target_sr)


def _finalize(audio: np.ndarray, sr: int, target_sr: int) -> tuple[np.ndarray, int]:
    duration = len(audio) / sr if sr else 0.0
    if duration < MIN_DURATION_SEC:
        raise AudioValidationError(
            f"Recording too short: {duration:.1f} s (minimum {MIN_DURATION_SEC} s)"
        )
    if duration > MAX_DURATION_SEC:
        raise AudioValidationError(
            f"Recording too long: {duration:.1f} s (maximum {MAX_DURATION_SEC} s)"
        )

    if sr != target_sr:
        audio = librosa.resample(audio, orig_sr=sr, target_sr=target_sr)
        sr = target_sr

    logger.info("Loaded recording: %.2f s at %d Hz", duration, sr)
    return audio.astype(np.float32), sr
