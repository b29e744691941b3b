"""
Web service launcher
"""

import os

import uvicorn


def marketfeed_main() -> None:
    """Start the FastAPI web service."""

    host = os.getenv("MARKETFEED_HOST", "0.0.0.0")
    port = int(os.getenv("MARKETFEED_PORT", "8000"))
    reload = os.getenv("MARKETFEED_RELOAD", "false").lower() == "true"

    uvicorn.run("marketfeed.web.app:app", host=host, port=port, reload=reload, log_level="info")


if __name__ == "__main__":
    marketfeed_main()
