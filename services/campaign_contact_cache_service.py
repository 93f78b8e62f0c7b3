"""
CampaignContactCacheService - maps a cell number to its active conversation

Redis holds one hash per (cell, messageservice_sid) pair, refreshed
every time a conversation's status changes. Lookups read that hash
first and, unless restricted to the cache, fall back to the database.
"""

import logging
from typing import Optional

from config import CacheSettings
from services.cache_keys import CacheKeys
from services.message_models import ActiveContact, ContactSnapshot

logger = logging.getLogger(__name__)


def _to_int(value) -> Optional[int]:
    return int(value) if value not in (None, '') else None


class CampaignContactCacheService:
    """Identity cache for inbound message routing"""

    def __init__(self, campaign_contact_repository, message_repository,
                 redis_client=None, settings: Optional[CacheSettings] = None):
        """
        Initialize service with injected dependencies.

        Args:
            campaign_contact_repository: Repository for campaign contact lookups/updates
            message_repository: Repository used to find a contact's latest inbound message
            redis_client: Redis client, or None when caching is disabled
            settings: Cache settings (prefix and TTL)
        """
        self.campaign_contact_repository = campaign_contact_repository
        self.message_repository = message_repository
        self.redis = redis_client
        self.settings = settings or CacheSettings()
        self.keys = CacheKeys(self.settings)

    def lookup_by_cell(self, cell: str, service: Optional[str], messageservice_sid: Optional[str],
                       cache_only: bool = False) -> Optional[ActiveContact]:
        """
        Find the active conversation for a cell number.

        Args:
            cell: Contact phone number
            service: Provider name (not part of the cache key)
            messageservice_sid: Provider messaging service id
            cache_only: Never fall back to the database

        Returns:
            ActiveContact, or None if no active conversation is known. Only
            database results carry service_id.
        """
        if self.redis is not None:
            cached = self.redis.hgetall(self.keys.cell(cell, messageservice_sid))
            if cached:
                return ActiveContact(
                    campaign_contact_id=int(cached['campaign_contact_id']),
                    assignment_id=_to_int(cached.get('assignment_id')),
                    campaign_id=_to_int(cached.get('campaign_id')),
                    message_status=cached.get('message_status') or None,
                    timezone_offset=cached.get('timezone_offset') or None,
                )

        if cache_only:
            return None

        contact = self.campaign_contact_repository.find_active_by_cell(cell, messageservice_sid)
        if contact is None:
            logger.debug(f"No active campaign contact for cell {cell} ({service or 'any service'})")
            return None

        return ActiveContact(
            campaign_contact_id=contact.id,
            assignment_id=contact.assignment_id,
            campaign_id=contact.campaign_id,
            message_status=contact.message_status,
            timezone_offset=contact.timezone_offset,
            service_id=self.message_repository.latest_inbound_service_id(contact.id),
        )

    def update_status(self, contact: ContactSnapshot, new_status: str) -> None:
        """
        Record a conversation's new message status.

        Args:
            contact: Conversation data (at least id; cell/messageservice_sid to refresh the cache)
            new_status: Status to store
        """
        self.campaign_contact_repository.update_status(contact.id, new_status)
        self.campaign_contact_repository.commit()

        if self.redis is None or not contact.cell:
            return

        key = self.keys.cell(contact.cell, contact.messageservice_sid)
        mapping = {
            'campaign_contact_id': contact.id,
            'assignment_id': contact.assignment_id,
            'campaign_id': contact.campaign_id,
            'message_status': new_status,
            'timezone_offset': contact.timezone_offset,
        }
        pipe = self.redis.pipeline(transaction=True)
        # Unknown fields keep whatever the hash already holds
        pipe.hset(key, mapping={k: v for k, v in mapping.items() if v is not None})
        pipe.expire(key, self.settings.message_ttl_seconds)
        pipe.execute()
