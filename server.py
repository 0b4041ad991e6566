"""
Development server for the Nomic bot webhook.
Runs the FastAPI app with uvicorn; the hunger job is scheduled on startup.
"""

import logging
import os

import uvicorn

from nomic import config

PORT = int(os.environ.get("PORT", "8080"))

if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    print(f"Serving at http://localhost:{PORT}")
    print(f"Point the GitHub webhook at http://localhost:{PORT}/webhook")
    uvicorn.run("nomic.api.main:app", host="0.0.0.0", port=PORT)
