"""POST /api/v1/analyze: run one recording through the voice engine.

The upload is decoded, sliced into frames and fed to a fresh engine as if it
were a live capture; the session ends at the configured duration or when the
recording runs out.
"""

import logging
import time

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from voicelab.audio_io import AudioValidationError, load_bytes
from voicelab.engine import InsufficientSignalError, VoiceAnalysisEngine
from voicelab.frames import FrameValidationError, iter_frames

from .. import config
from ..schemas import AnalysisResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid audio"},
        422: {"model": ErrorResponse, "description": "No usable signal"},
    },
    summary="Analyze a voice recording",
    description="Upload a sustained vowel recording (about 5 seconds of 'aaaa').",
)
async def analyze_voice(
    audio: UploadFile = File(..., description="Sustained vowel recording (WAV/FLAC/OGG)"),
    allow_placeholder: bool = Form(False, description="Return flagged placeholder values for silent input"),
):
    start = time.monotonic()

    file_bytes = await audio.read()
    if len(file_bytes) > config.AUDIO_MAX_FILE_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large (maximum {config.AUDIO_MAX_FILE_SIZE_MB} MB)",
        )

    try:
        samples, sr = load_bytes(file_bytes, audio.filename or "audio.wav")
    except AudioValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    engine = VoiceAnalysisEngine(session_seconds=config.SESSION_SECONDS)
    try:
        result = await run_in_threadpool(
            engine.run, iter_frames(samples, sr), allow_placeholder=allow_placeholder,
        )
    except InsufficientSignalError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except FrameValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    processing_time_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        "Analysis: risk=%s quality=%.0f source=%s time=%dms",
        result.risk_level, result.quality_score, result.signal_source, processing_time_ms,
    )
    return AnalysisResponse(**result.to_dict(), processing_time_ms=processing_time_ms)
