"""
Upstash Redis integration: model state persistence and rate limiting.

`client` stays None until `initialize()` runs in the FastAPI lifespan, and
stays None when credentials are absent or the server does not answer a ping.
Every consumer then falls back to process memory. Consumers read
`redis_client.client` at call time instead of importing the variable.
"""

import os
import logging
from upstash_redis import Redis

logger = logging.getLogger(__name__)

client = None  # Redis | None


def initialize() -> None:
    global client

    redis_url = os.getenv("UPSTASH_REDIS_HOST")
    redis_token = os.getenv("UPSTASH_REDIS_PASSWORD")

    if not (redis_url and redis_token):
        logger.warning(
            "[STARTUP] Redis credentials not found. Model state and rate limiting "
            "will fallback to memory."
        )
        return

    try:
        candidate = Redis(url=redis_url, token=redis_token)
        candidate.ping()
    except Exception as e:
        logger.error(f"[STARTUP] Upstash Redis unreachable, using memory fallback: {e}")
        return

    client = candidate
    logger.info("[STARTUP] Upstash Redis client initialized successfully")
