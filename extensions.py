# extensions.py

import logging
from typing import Optional

import redis
from flask_sqlalchemy import SQLAlchemy

from config import CacheSettings

logger = logging.getLogger(__name__)

# This is now the single source of truth for the db object.
# It's initialized here, but not yet connected to a Flask app.
db = SQLAlchemy()


def create_redis_client(settings: CacheSettings) -> Optional[redis.Redis]:
    """
    Create the redis client used by the message cache.

    Returns None when no REDIS_URL is configured; callers treat that as
    "caching disabled" and build their no-op variants.
    """
    if not settings.enabled:
        logger.info("REDIS_URL not set, message cache disabled")
        return None

    redis_url = settings.redis_url
    if redis_url.startswith('rediss://'):
        # Managed Redis/Valkey services don't need cert validation
        if 'ssl_cert_reqs' not in redis_url:
            separator = '&' if '?' in redis_url else '?'
            redis_url += f"{separator}ssl_cert_reqs=CERT_NONE"
        logger.info("Using Redis URL: rediss://[REDACTED]")
    else:
        logger.info(f"Using Redis URL: {redis_url.split('@')[1] if '@' in redis_url else redis_url}")

    return redis.from_url(redis_url, decode_responses=True)
