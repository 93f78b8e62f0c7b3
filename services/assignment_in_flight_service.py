"""
AssignmentInFlightService - tracks outbound sends that have not been saved yet

Each campaign has a sorted set of campaign contact ids currently being
sent to, scored by the time the send started, and a sorted set of
texter user ids scored by their last activity.
"""

import logging
import time
from typing import Optional

from config import CacheSettings
from services.cache_keys import CacheKeys

logger = logging.getLogger(__name__)


class AssignmentInFlightService:
    """In-flight send accounting; a no-op without redis"""

    def __init__(self, redis_client=None, settings: Optional[CacheSettings] = None):
        self.redis = redis_client
        self.settings = settings or CacheSettings()
        self.keys = CacheKeys(self.settings)

    def add_in_flight(self, campaign_id: int, campaign_contact_id: int) -> None:
        """Mark a send to this contact as started."""
        if self.redis is None:
            return
        key = self.keys.in_flight(campaign_id)
        pipe = self.redis.pipeline(transaction=True)
        pipe.zadd(key, {str(campaign_contact_id): time.time()})
        pipe.expire(key, self.settings.message_ttl_seconds)
        pipe.execute()

    def pop_in_flight(self, campaign_id: int, campaign_contact_id: int,
                      texter_user_id: Optional[int] = None) -> None:
        """
        Release the in-flight slot for a contact.

        Args:
            campaign_id: Campaign the send belongs to
            campaign_contact_id: Contact whose send completed
            texter_user_id: When set, also records this texter's last activity
        """
        if self.redis is None:
            return
        pipe = self.redis.pipeline(transaction=True)
        pipe.zrem(self.keys.in_flight(campaign_id), str(campaign_contact_id))
        if texter_user_id:
            activity_key = self.keys.texter_activity(campaign_id)
            pipe.zadd(activity_key, {str(texter_user_id): time.time()})
            pipe.expire(activity_key, self.settings.message_ttl_seconds)
        pipe.execute()
        logger.debug(f"Popped in-flight contact {campaign_contact_id} for campaign {campaign_id}")

    def count_in_flight(self, campaign_id: int) -> int:
        """Number of sends currently in flight for a campaign."""
        if self.redis is None:
            return 0
        return self.redis.zcard(self.keys.in_flight(campaign_id))
