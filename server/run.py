"""Serve the VoiceLab API with uvicorn.

Run from the project root:
    python -m server.run
"""

import uvicorn

from server.app import config


def main():
    # Reload watches files and only works with a single worker.
    uvicorn.run(
        "server.app.main:app",
        host=config.HOST,
        port=config.PORT,
        workers=1 if config.DEBUG else config.WORKERS,
        reload=config.DEBUG,
        log_level="debug" if config.DEBUG else "info",
    )


if __name__ == "__main__":
    main()
