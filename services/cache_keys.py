"""
Redis key derivation shared by every component that touches the cache.
"""

from config import CacheSettings


def message_cache_key(campaign_contact_id, prefix: str = '') -> str:
    """Key of a campaign contact's message thread list."""
    return f"{prefix or ''}messages-{campaign_contact_id}"


class CacheKeys:
    """Namespaced keys for one CacheSettings prefix."""

    def __init__(self, settings: CacheSettings):
        self.prefix = settings.key_prefix or ''

    def messages(self, campaign_contact_id) -> str:
        return message_cache_key(campaign_contact_id, self.prefix)

    def cell(self, cell: str, messageservice_sid) -> str:
        return f"{self.prefix}cell-{cell}-{messageservice_sid or ''}"

    def in_flight(self, campaign_id) -> str:
        return f"{self.prefix}inflight-{campaign_id}"

    def texter_activity(self, campaign_id) -> str:
        return f"{self.prefix}texterlast-{campaign_id}"
