"""VoiceLab server configuration.

All settings are loaded from environment variables with sensible defaults
for local development.
"""

import os

# --- Upload constraints ---
AUDIO_MAX_FILE_SIZE_MB = int(os.environ.get("VOICELAB_MAX_UPLOAD_MB", "10"))
SESSION_SECONDS = float(os.environ.get("VOICELAB_SESSION_SECONDS", "5.0"))

# --- API ---
API_VERSION = "v1"
API_PREFIX = f"/api/{API_VERSION}"

# CORS: comma-separated allowed origins (e.g. "https://myapp.com,http://localhost:3000")
# Empty or unset defaults to localhost-only for development.
_cors_raw = os.environ.get("VOICELAB_CORS_ORIGINS", "")
CORS_ORIGINS: list[str] = [
    o.strip() for o in _cors_raw.split(",") if o.strip()
] or ["http://localhost:3000", "http://localhost:8080"]

# --- Server ---
HOST = os.environ.get("VOICELAB_HOST", "0.0.0.0")
PORT = int(os.environ.get("VOICELAB_PORT", "8000"))
WORKERS = int(os.environ.get("VOICELAB_WORKERS", "2"))
DEBUG = os.environ.get("VOICELAB_DEBUG", "false").lower() == "true"
