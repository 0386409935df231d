#!/usr/bin/env python
"""Start the FastAPI application with port configuration from the environment."""
import os

import uvicorn

from stockwatch.core.config import get_settings

if __name__ == "__main__":
    # Get port from environment, default to 8000
    port = int(os.environ.get("PORT", 8000))

    print(f"Starting application on port {port}")

    uvicorn.run(
        "stockwatch.main:app",
        host="0.0.0.0",
        port=port,
        log_level=get_settings().LOG_LEVEL.lower()
    )
