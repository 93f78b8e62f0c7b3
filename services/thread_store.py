"""
ThreadStore - per campaign contact message thread cache

Threads live in a redis list under CacheKeys.messages(). Writes LPUSH,
so the list is newest-first; reads reverse it back to oldest-first.
Every write resets the expiry, so a thread fades out 24 hours after the
last message was added.

An absent entry means "unknown", never "empty": callers fall back to
the database on a miss.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config import CacheSettings
from services.cache_keys import CacheKeys
from services.message_models import ThreadMessage

logger = logging.getLogger(__name__)


class ThreadStore(ABC):
    """Interface shared by the redis-backed and the disabled store."""

    enabled = False

    @abstractmethod
    def read(self, campaign_contact_id: int) -> Tuple[bool, List[ThreadMessage]]:
        """
        Read a cached thread.

        Returns:
            (exists, messages) with messages oldest-first
        """

    @abstractmethod
    def write(self, campaign_contact_id: int, messages: Sequence[ThreadMessage],
              overwrite: bool = False) -> None:
        """
        Add messages to a thread and reset its expiry.

        Args:
            campaign_contact_id: Thread owner
            messages: Messages in chronological order
            overwrite: Replace the whole entry instead of appending
        """

    @abstractmethod
    def clear(self, campaign_contact_id: int) -> None:
        """Drop a cached thread."""

    def seed(self, messages: Iterable[ThreadMessage]) -> Dict[int, int]:
        """
        Rebuild cache entries from a database result.

        The result must be complete for each campaign contact it touches.
        Entries are rebuilt one contact at a time.

        Returns:
            Mapping of campaign contact id to number of messages cached
        """
        threads: Dict[int, List[ThreadMessage]] = OrderedDict()
        for message in messages:
            if message.campaign_contact_id is None:
                continue
            threads.setdefault(message.campaign_contact_id, []).append(message)

        for campaign_contact_id, thread in threads.items():
            self.write(campaign_contact_id, thread, overwrite=True)

        return {contact_id: len(thread) for contact_id, thread in threads.items()}


class RedisThreadStore(ThreadStore):
    """Thread cache backed by redis lists."""

    enabled = True

    def __init__(self, redis_client, settings: CacheSettings):
        self.redis = redis_client
        self.keys = CacheKeys(settings)
        self.ttl = settings.message_ttl_seconds

    def read(self, campaign_contact_id: int) -> Tuple[bool, List[ThreadMessage]]:
        key = self.keys.messages(campaign_contact_id)
        pipe = self.redis.pipeline(transaction=True)
        pipe.exists(key)
        pipe.lrange(key, 0, -1)
        exists, raw_messages = pipe.execute()

        if not exists:
            logger.debug(f"Thread cache miss for key: {key}")
            return False, []

        logger.debug(f"Thread cache hit for key: {key}")
        # lrange returns newest first
        return True, [ThreadMessage.from_cache_dict(json.loads(raw))
                      for raw in reversed(raw_messages)]

    def write(self, campaign_contact_id: int, messages: Sequence[ThreadMessage],
              overwrite: bool = False) -> None:
        key = self.keys.messages(campaign_contact_id)
        pipe = self.redis.pipeline(transaction=True)
        if overwrite:
            pipe.delete(key)
        if messages:
            pipe.lpush(key, *[json.dumps(m.to_cache_dict()) for m in messages])
        pipe.expire(key, self.ttl)
        pipe.execute()
        logger.debug(f"Cached {len(messages)} messages for key: {key} (overwrite={overwrite})")

    def clear(self, campaign_contact_id: int) -> None:
        key = self.keys.messages(campaign_contact_id)
        self.redis.delete(key)
        logger.debug(f"Deleted thread cache key: {key}")


class NullThreadStore(ThreadStore):
    """Used when no cache backend is configured; every read is a miss."""

    def read(self, campaign_contact_id: int) -> Tuple[bool, List[ThreadMessage]]:
        return False, []

    def write(self, campaign_contact_id: int, messages: Sequence[ThreadMessage],
              overwrite: bool = False) -> None:
        return None

    def clear(self, campaign_contact_id: int) -> None:
        return None

    def seed(self, messages: Iterable[ThreadMessage]) -> Dict[int, int]:
        return {}


def create_thread_store(redis_client: Optional[object], settings: CacheSettings) -> ThreadStore:
    """Pick the thread store implementation for the configured backend."""
    if redis_client is None:
        return NullThreadStore()
    return RedisThreadStore(redis_client, settings)
