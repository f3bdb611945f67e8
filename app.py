#!/usr/bin/env python3
"""
Main entry point for URL shortener service.

Concurrency: a single uvicorn process serves many connections via async I/O.
All state lives in one in-memory store owned by this process, so the service
must run as a single worker; short URLs do not survive a restart.

Usage:
    python app.py

Environment variables:
    HOST - Host to bind to
    PORT - Port to listen on
    BASE_URL - Base URL for short links
    SHORT_CODE_LENGTH - Length of generated short codes
    MAX_COLLISION_RETRIES - Attempts at a unique generated code
    STORE_SHARDS - Lock stripes in the in-memory store
    CORS_ORIGINS - JSON list of allowed origins
    LOG_LEVEL - Logging level
"""

import logging
import signal
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from shortener.events import EventChannel
from shortener.storage import InMemoryURLStore
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from shortener.common.logging_config import setup_logging
from shortener_web import create_app


def build_app(config: Config, logger: Optional[logging.Logger] = None) -> FastAPI:
    """Wire store, generator, event channel and service into an app.

    Args:
        config: Configuration instance
        logger: Optional logger

    Returns:
        Configured FastAPI app
    """
    logger = logger or logging.getLogger("shortener")

    store = InMemoryURLStore(shards=config.store_shards)
    events = EventChannel(maxsize=config.event_queue_size)
    service = URLShortenerService(
        store=store,
        short_code_generator=ShortCodeGenerator(default_length=config.short_code_length),
        events=events,
        max_collision_retries=config.max_collision_retries,
        custom_code_min_length=config.custom_code_min_length,
        short_code_max_length=config.short_code_max_length,
        max_url_length=config.max_url_length,
    )

    return create_app(service_instance=service, config=config, logger=logger)


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("URL Shortener Service")
    logger.info(f"Configuration: {config.model_dump()}")

    app = build_app(config, logger=logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,  # LoggingMiddleware logs requests
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
