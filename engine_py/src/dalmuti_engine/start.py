#!/usr/bin/env python3
"""Startup script for the Dalmuti game backend"""

import logging

import uvicorn

from .config import Settings

logger = logging.getLogger(__name__)


def main():
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting Dalmuti game backend on %s:%d", settings.host, settings.port)
    logger.info("Health check available at: http://%s:%d/health", settings.host, settings.port)
    logger.info("WebSocket endpoint: ws://%s:%d/ws", settings.host, settings.port)

    uvicorn.run(
        "dalmuti_engine.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level,
    )

if __name__ == "__main__":
    main()
