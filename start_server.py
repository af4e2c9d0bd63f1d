#!/usr/bin/env python3
"""Simple server startup script for container deployment."""

import os

import uvicorn


def main():
    """Start the FastAPI server."""
    # Get configuration from environment
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))

    print("Starting Lead Capture service...")
    print(f"Host: {host}")
    print(f"Port: {port}")
    print(f"Environment: {os.getenv('ENVIRONMENT', 'not set')}")

    # A single worker: the fallback queue has one writer per store
    uvicorn.run(
        "lead_capture.main:app",
        host=host,
        port=port,
        workers=1,
        log_level="info",
        access_log=True,
    )


if __name__ == "__main__":
    main()
