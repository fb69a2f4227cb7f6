#!/usr/bin/env python3
# backend/run.py
"""
Development server runner for the Spyke marketplace API.
For local development only: reload is on and the SQLite file lives in backend/.
"""
import logging
import os
from pathlib import Path

import uvicorn

backend_dir = Path(__file__).parent
os.chdir(backend_dir)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    logging.basicConfig(level=logging.INFO)
    logger.info("Starting development server on http://localhost:%d (docs at /docs)", port)

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=True,
        reload_delay=0.5,
        log_level="info",
        timeout_graceful_shutdown=5,
    )
