"""VoiceLab: FastAPI server application.

Voice biomarker screening API: an uploaded sustained-vowel recording is run
through the real-time engine frame by frame and the session analysis is
returned as JSON.
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import voicelab

from . import config
from .routes import analyze, health

logging.basicConfig(
    level=logging.DEBUG if config.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("voicelab.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("VoiceLab server starting (session %.1f s)...", config.SESSION_SECONDS)
    yield
    logger.info("VoiceLab server shutting down.")


app = FastAPI(
    title="VoiceLab API",
    description=(
        "Voice biomarker screening API. Upload a sustained vowel recording "
        "and receive acoustic findings, risk indicators and recommendations."
    ),
    version=voicelab.__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# --- Request logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.monotonic()
    response = await call_next(request)
    elapsed = (time.monotonic() - start) * 1000
    logger.info(
        "%s %s → %d (%.0fms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed,
    )
    return response


# --- Global error handler ---
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "message": "Internal server error. Please try again later.",
        },
    )


# --- Register routes ---
app.include_router(analyze.router, prefix=config.API_PREFIX, tags=["Analysis"])
app.include_router(health.router, prefix=config.API_PREFIX, tags=["Health"])


# --- Root ---
@app.get("/", include_in_schema=False)
def root():
    return {
        "app": "VoiceLab",
        "version": voicelab.__version__,
        "docs": "/docs",
        "health": f"{config.API_PREFIX}/health",
    }
