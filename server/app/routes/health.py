"""Health endpoint."""

import time

from fastapi import APIRouter

import voicelab

from .. import config
from ..schemas import HealthResponse

router = APIRouter()

_start_time = time.monotonic()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
def health_check():
    return HealthResponse(
        version=voicelab.__version__,
        session_seconds=config.SESSION_SECONDS,
        uptime_seconds=round(time.monotonic() - _start_time, 1),
    )
